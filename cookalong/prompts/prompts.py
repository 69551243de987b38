"""Prompt builders for the recipe generator.

Each builder returns the user prompt for one generator operation. Output
structure is enforced separately through the response schema passed to
Gemini, so prompts only describe the content.
"""

import json

from cookalong.models.models import Cooktop, Language, Recipe, Step


def _numbered_steps(steps) -> str:
    return " ".join(f"{i + 1}. {step.description}" for i, step in enumerate(steps))


def recipe_for_query_prompt(query: str) -> str:
    return (
        f'Generate a recipe for "{query}". The recipe should be creative and something a home cook '
        "can make. Provide all the details needed to be displayed in a recipe app."
    )


def recipe_for_ingredients_prompt(ingredients: list[str]) -> str:
    return (
        "Generate a creative recipe that primarily uses the following ingredients: "
        f"{', '.join(ingredients)}. It's okay to add a few common pantry staples. "
        "Provide all the details needed to be displayed in a recipe app."
    )


def recipes_for_search_prompt(query: str, count: int) -> str:
    return (
        f'Generate a list of {count} diverse and creative recipes related to "{query}". '
        "For example, if the search is 'chicken curry', suggest different regional varieties or "
        "styles of chicken curry. The recipes should be suitable for a home cook and include all "
        "necessary fields: name, description, category, prep time, cook time, servings, "
        "ingredients, and steps with timings."
    )


def recipes_for_category_prompt(category: str, count: int) -> str:
    return (
        f'Generate a list of {count} creative and diverse Indian recipes for the category: "{category}". '
        "For example, if the category is 'Desserts', suggest Indian desserts. The recipes should be "
        "suitable for a home cook and include name, description, category, prep time, cook time, "
        "servings, ingredients, and steps with timings."
    )


def chefs_tip_prompt(recipe_name: str, step_description: str) -> str:
    return (
        f'I am making a recipe called "{recipe_name}". I am on the following step: '
        f'"{step_description}". Give me a single, concise, and helpful "chef\'s tip" for this '
        "specific step. The tip should be encouraging and easy to understand for a beginner cook. "
        'Do not start with "Chef\'s Tip:". Just provide the tip itself.'
    )


def substitute_prompt(recipe_name: str, all_ingredients: list[str], missing: str) -> str:
    return (
        f'I am making a recipe called "{recipe_name}". The full list of ingredients is: '
        f'{", ".join(all_ingredients)}. I do not have "{missing}". Provide a specific ingredient '
        "substitute including quantity (e.g., '1 cup vegetable broth'), and a brief explanation "
        "of why it works or how to use it."
    )


def ingredient_adaptation_prompt(
    recipe_name: str,
    original_ingredients: list[str],
    available_ingredients: list[str],
    steps: list[Step],
) -> str:
    return (
        f'I am making a recipe called "{recipe_name}".\n'
        f"The original ingredients are: {', '.join(original_ingredients)}.\n"
        f"The original steps are: {_numbered_steps(steps)}.\n\n"
        f"However, I only have the following ingredients: {', '.join(available_ingredients)}.\n\n"
        "Please update the recipe instructions to work with ONLY the ingredients I have. Also, "
        "provide the final list of ingredients that will be used in the updated recipe. The cooking "
        "and prep times might change, but focus on adjusting the steps. Make the new instructions "
        "clear and complete."
    )


def translation_prompt(recipe: Recipe, language: Language) -> str:
    translatable = {
        "name": recipe.name,
        "description": recipe.description,
        "ingredients": list(recipe.ingredients),
        "steps": [{"description": s.description, "time": s.time} for s in recipe.steps],
    }
    return (
        "Translate the following recipe's text fields ('name', 'description', 'ingredients' array, "
        f"and 'description' within each step) into {language.value}.\n"
        "Maintain the exact JSON structure provided.\n"
        "Ensure the 'time' value for each step remains an unchanged integer (in seconds).\n"
        "Do not add any extra explanations or text outside of the JSON object.\n\n"
        f"Recipe to translate:\n{json.dumps(translatable, indent=2, ensure_ascii=False)}"
    )


_COOKTOP_INSTRUCTIONS = {
    Cooktop.INDUCTION: (
        "Adjust instructions about heat levels and cooking methods. For any instruction about flame "
        "or heat level (e.g., 'medium flame', 'low heat'), you MUST replace it with a specific "
        "temperature in Celsius AND a power setting in watts, appropriate for a standard home "
        "induction cooktop. The format MUST be 'TEMPERATURE°C / POWERW' (e.g., '120°C / 1000W')."
    ),
    Cooktop.KETTLE: (
        "Adjust the instructions to be achievable using only a simple electric kettle. Focus on "
        "steps involving boiling water, steeping, or creating hot water baths. If a step cannot be "
        "done with a kettle, modify it to the closest possible alternative."
    ),
}


def cooktop_prompt(recipe_name: str, steps: list[Step], cooktop: Cooktop) -> str:
    if cooktop not in _COOKTOP_INSTRUCTIONS:
        raise ValueError(f"No adaptation instructions for {cooktop.value}")
    intro = f'I am making a recipe called "{recipe_name}".' if recipe_name else "I am making a recipe."
    return (
        f"{intro}\n"
        f"The original instructions are: {_numbered_steps(steps)}.\n\n"
        f"Please modify these instructions to be suitable for cooking on a '{cooktop.value}'.\n"
        f"{_COOKTOP_INSTRUCTIONS[cooktop]}\n"
        "Return ONLY the modified steps array in the specified JSON format. Keep the JSON structure "
        "and preserve the original 'time' values for each step. Do not add any extra commentary."
    )


def image_prompt(recipe_name: str, recipe_description: str) -> str:
    return (
        f'A delicious, vibrant, professionally photographed plate of "{recipe_name}", '
        f"suitable for a recipe book. {recipe_description}"
    )
