"""Data models and schemas for the cook-along service.

Defines Pydantic models for recipes, the structured payloads exchanged with the
recipe generator, and the display view of a cooking session.
All models use Pydantic v2 for strict validation and JSON schema generation.

Recipes are frozen: a recipe handed from the favorites store to a session (or
back) can never be mutated in place, every change produces a new instance.
"""

from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Cooktop(str, Enum):
    """Cooking appliance the instructions are written for."""

    LPG = "LPG Cooktop"
    INDUCTION = "Induction Cooktop"
    KETTLE = "Simple Electric Kettle"

    @classmethod
    def default(cls) -> "Cooktop":
        return cls.LPG


class Language(str, Enum):
    """Display languages offered for a recipe."""

    ENGLISH = "English"
    HINDI = "Hindi"
    HINGLISH = "Hinglish"

    @classmethod
    def default(cls) -> "Language":
        return cls.ENGLISH


class Step(BaseModel):
    """A single cooking instruction with its timer duration."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    description: Annotated[str, Field(min_length=1, description="A single step in the cooking instructions.")]
    time: Annotated[
        int,
        Field(
            ge=0,
            description=(
                "Estimated time for this step in SECONDS. For example, a 5-minute step should have "
                "a time value of 300. Use 0 for steps without a specific duration."
            ),
        ),
    ]


class Recipe(BaseModel):
    """Immutable snapshot of a recipe as loaded, generated, or adapted.

    Serializes with the camelCase keys used by the web client (imageUrl,
    prepTime, cookTime, isGenerated) so remote `recipe_data` rows and the
    guest favorites file stay interchangeable with it.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    id: Annotated[str, Field(min_length=1, description="Globally unique recipe identifier")]
    name: Annotated[str, Field(min_length=1, max_length=200)]
    description: Annotated[str, Field("", max_length=2000)]
    category: Annotated[str, Field("", description="Open category domain, e.g. 'Vegetarian' or 'Desserts'")]
    image_url: Annotated[str, Field("", alias="imageUrl", description="Image URL or data URL, empty when none yet")]
    ingredients: Annotated[tuple[str, ...], Field(default_factory=tuple)]
    steps: Annotated[tuple[Step, ...], Field(default_factory=tuple)]
    prep_time: Annotated[int, Field(0, ge=0, alias="prepTime", description="Preparation time in minutes")]
    cook_time: Annotated[int, Field(0, ge=0, alias="cookTime", description="Cooking time in minutes")]
    servings: Annotated[int, Field(1, ge=1)]
    is_generated: Annotated[bool, Field(False, alias="isGenerated")]

    @property
    def total_time(self) -> int:
        return self.prep_time + self.cook_time

    def to_record(self) -> dict:
        """Serialize to the JSON-compatible dict stored remotely and locally."""
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_record(cls, data: dict) -> "Recipe":
        return cls.model_validate(data)


class RecipeDraft(BaseModel):
    """Recipe content as produced by the generator, before an id is minted."""

    name: Annotated[str, Field(min_length=1, description="The name of the recipe.")]
    description: Annotated[str, Field(description="A short, enticing description of the dish.")]
    category: Annotated[
        str,
        Field(description="A suitable category for the recipe, like 'Vegetarian', 'Quick Meals', or 'Desserts'."),
    ]
    prep_time: Annotated[int, Field(ge=0, description="The preparation time in minutes.")]
    cook_time: Annotated[int, Field(ge=0, description="The cooking time in minutes.")]
    servings: Annotated[int, Field(ge=1, description="The number of servings this recipe makes.")]
    ingredients: Annotated[
        list[str], Field(min_length=1, description="A list of ingredients with quantities and units.")
    ]
    steps: Annotated[
        list[Step], Field(min_length=1, description="The step-by-step instructions for preparing the dish.")
    ]


class SubstituteSuggestion(BaseModel):
    """Replacement for an ingredient the cook does not have."""

    model_config = ConfigDict(str_strip_whitespace=True)

    substitute: Annotated[
        str,
        Field(
            min_length=1,
            description="The specific ingredient to use as a substitute, including quantity. E.g., '1 tsp baking powder'.",
        ),
    ]
    explanation: Annotated[
        str,
        Field(min_length=1, description="A brief explanation of why this is a good substitute or how to use it."),
    ]


class IngredientAdaptation(BaseModel):
    """Recipe rewritten around the ingredients the cook actually has."""

    ingredients: Annotated[
        list[str], Field(description="The updated list of ingredients based on what the user has available.")
    ]
    steps: Annotated[
        list[Step],
        Field(
            min_length=1,
            description="The updated step-by-step instructions for preparing the dish with the available ingredients.",
        ),
    ]


class RecipeTranslation(BaseModel):
    """Translated text fields of a recipe. Step times must match the source."""

    name: Annotated[str, Field(min_length=1, description="The translated name of the recipe.")]
    description: Annotated[str, Field(description="The translated short description of the dish.")]
    ingredients: Annotated[list[str], Field(description="The translated list of ingredients.")]
    steps: Annotated[list[Step], Field(description="The translated step-by-step instructions.")]


class CooktopAdaptation(BaseModel):
    """Steps rewritten for a specific cooktop, times preserved."""

    steps: Annotated[
        list[Step],
        Field(
            min_length=1,
            description="The updated step-by-step instructions for preparing the dish on the specified cooktop.",
        ),
    ]


class SessionView(BaseModel):
    """What a cooking session displays: working recipe with the translation overlay applied.

    Step times always come from the working recipe, never from the overlay.
    """

    model_config = ConfigDict(frozen=True)

    recipe_id: str
    name: str
    description: str
    language: Language
    cooktop: Cooktop
    ingredients: tuple[str, ...]
    steps: tuple[Step, ...]
    active_step_index: Optional[int] = None
    completed_steps: frozenset[int] = frozenset()

    @field_validator("completed_steps", mode="before")
    @classmethod
    def freeze_completed(cls, v) -> frozenset:
        return frozenset(v or ())
