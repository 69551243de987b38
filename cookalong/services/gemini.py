"""Recipe generation through the Gemini API.

GeminiRecipeGateway implements RecipeGenerationGateway on top of the
google-genai SDK:

- Structured calls request `application/json` output constrained by a
  response schema built from the pydantic payload models.
- parse_gemini_response() is lenient about surrounding text and code fences,
  then validates strictly. Unparseable text raises GenerationFailure, a
  well-formed but schema-invalid payload raises ValidationFailure.
- _generate_with_retries() retries transient errors and empty/invalid
  answers with exponential backoff, and fails fast on permanent errors
  (invalid API key, malformed request).
- Generated recipes get a freshly minted id and `is_generated=True`.
- Images come from Imagen, are checked with `filetype` and returned as a
  `data:` URL.
"""

import asyncio
import base64
import json
import re
import uuid
from typing import Any, Optional

import filetype
from google import genai
from google.genai import types
from pydantic import TypeAdapter, ValidationError

from cookalong.models.errors import CookalongError, GenerationFailure, ValidationFailure
from cookalong.models.models import (
    Cooktop,
    CooktopAdaptation,
    IngredientAdaptation,
    Language,
    Recipe,
    RecipeDraft,
    RecipeTranslation,
    Step,
    SubstituteSuggestion,
)
from cookalong.prompts import prompts
from cookalong.services.gateway import TIP_FALLBACK, RecipeGenerationGateway
from cookalong.utils.config import config
from cookalong.utils.logger import logger

TRANSIENT_KEYWORDS = ("timeout", "connection", "429", "500", "502", "503", "unavailable", "retryable")

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")


def mint_recipe_id(name: str) -> str:
    """Create an id that cannot collide with static or earlier generated ids.

    Static recipes use short numeric ids; generated ones are prefixed and
    carry a random uuid4 component, so two recipes with the same name
    generated in the same instant still differ.
    """
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-") or "recipe"
    return f"generated-{slug}-{uuid.uuid4().hex[:12]}"


def draft_to_recipe(draft: RecipeDraft) -> Recipe:
    return Recipe(
        id=mint_recipe_id(draft.name),
        name=draft.name,
        description=draft.description,
        category=draft.category,
        image_url="",
        ingredients=tuple(draft.ingredients),
        steps=tuple(draft.steps),
        prep_time=draft.prep_time,
        cook_time=draft.cook_time,
        servings=draft.servings,
        is_generated=True,
    )


def _extract_json(response_text: str) -> Any:
    """Pull a JSON value out of model output that may contain extra text."""
    cleaned = _FENCE_RE.sub("", response_text.strip())
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        logger.debug("Direct JSON parse failed, trying regex extraction")

    match = re.search(r"(\{.*\}|\[.*\])", cleaned, re.DOTALL)
    if match:
        try:
            return json.loads(match.group())
        except json.JSONDecodeError:
            logger.debug("Regex JSON extraction failed")
    return None


def parse_gemini_response(response_text: Optional[str], schema: Any) -> Any:
    """Parse JSON from a Gemini response and validate it against `schema`.

    Args:
        response_text: Raw response text (may include non-JSON text or code fences).
        schema: Pydantic model class or type understood by TypeAdapter (e.g. list[RecipeDraft]).

    Returns:
        The validated payload.

    Raises:
        GenerationFailure: Empty response or no JSON could be extracted.
        ValidationFailure: JSON found but it does not match the schema.
    """
    if not response_text or not response_text.strip():
        raise GenerationFailure("Empty response from Gemini")

    parsed = _extract_json(response_text)
    if parsed is None:
        logger.warning("Failed to parse JSON from Gemini response")
        raise GenerationFailure("Gemini response did not contain JSON")

    try:
        return TypeAdapter(schema).validate_python(parsed)
    except ValidationError as e:
        logger.warning(f"Gemini response failed validation: {e.error_count()} error(s)")
        raise ValidationFailure(f"Gemini response failed validation: {e}", cause=e) from e


def is_transient_error(exception: Exception) -> bool:
    if isinstance(exception, (asyncio.TimeoutError, TimeoutError, ConnectionError)):
        return True
    error_str = str(exception).lower()
    return any(keyword in error_str for keyword in TRANSIENT_KEYWORDS)


class GeminiRecipeGateway(RecipeGenerationGateway):
    """Recipe generator backed by Gemini text and Imagen image models."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        client: Optional[genai.Client] = None,
        model: Optional[str] = None,
        image_model: Optional[str] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[int] = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            api_key: Gemini API key. Defaults to config.GEMINI_API_KEY.
            client: Pre-built genai.Client (tests pass a mock).
            model: Text model id. Defaults to config.GEMINI_MODEL.
            image_model: Image model id. Defaults to config.IMAGE_MODEL.
            max_retries: Attempts per call. Defaults to config.MAX_RETRIES.
            retry_delay: Initial backoff delay in seconds, doubled after each retry.
        """
        self.client = client or genai.Client(api_key=api_key or config.GEMINI_API_KEY)
        self.model = model or config.GEMINI_MODEL
        self.image_model = image_model or config.IMAGE_MODEL
        self.max_retries = max_retries or config.MAX_RETRIES
        self.retry_delay = retry_delay or config.DELAY_BETWEEN_RETRIES

    async def _call_gemini(self, prompt: str, schema: Any = None) -> str:
        """Single generate_content call (no retries). Returns the response text."""
        generation_config = types.GenerateContentConfig(temperature=config.TEMPERATURE)
        if schema is not None:
            generation_config = types.GenerateContentConfig(
                temperature=config.TEMPERATURE,
                response_mime_type="application/json",
                response_schema=schema,
            )

        response = await asyncio.to_thread(
            self.client.models.generate_content,
            model=self.model,
            contents=prompt,
            config=generation_config,
        )
        return response.text or ""

    async def _generate_with_retries(self, prompt: str, schema: Any, operation: str) -> Any:
        """Call Gemini and parse the answer, retrying transient failures.

        Raises:
            GenerationFailure: Permanent error, or every attempt failed.
            ValidationFailure: The last attempt returned a schema-invalid payload.
        """
        delay_seconds = self.retry_delay
        last_error: Optional[CookalongError] = None

        for attempt in range(1, self.max_retries + 1):
            try:
                text = await self._call_gemini(prompt, schema)
                return parse_gemini_response(text, schema)
            except GenerationFailure as e:
                last_error = e
            except Exception as e:
                if not is_transient_error(e):
                    logger.warning(f"{operation}: permanent Gemini error, not retrying: {e}")
                    raise GenerationFailure(f"{operation} failed: {e}", cause=e) from e
                last_error = GenerationFailure(f"{operation} failed: {e}", cause=e)

            if attempt < self.max_retries:
                logger.debug(
                    f"{operation}: retrying (attempt {attempt + 1}/{self.max_retries}) "
                    f"after {delay_seconds}s: {last_error}"
                )
                await asyncio.sleep(delay_seconds)
                delay_seconds *= 2

        logger.warning(f"{operation}: giving up after {self.max_retries} attempts: {last_error}")
        raise last_error

    async def generate_from_query(self, text: str) -> Recipe:
        logger.info(f"Generating recipe for query: {text!r}")
        draft = await self._generate_with_retries(
            prompts.recipe_for_query_prompt(text), RecipeDraft, "Generate recipe"
        )
        return draft_to_recipe(draft)

    async def generate_from_ingredients(self, ingredients: list[str]) -> Recipe:
        if not ingredients:
            raise GenerationFailure("At least one ingredient is required")
        logger.info(f"Generating recipe from {len(ingredients)} ingredients")
        draft = await self._generate_with_retries(
            prompts.recipe_for_ingredients_prompt(ingredients), RecipeDraft, "Generate recipe from ingredients"
        )
        return draft_to_recipe(draft)

    async def generate_from_search(self, text: str) -> list[Recipe]:
        drafts = await self._generate_with_retries(
            prompts.recipes_for_search_prompt(text, config.SEARCH_RESULTS),
            list[RecipeDraft],
            "Generate search recipes",
        )
        return [draft_to_recipe(d) for d in drafts]

    async def generate_for_category(self, category: str) -> list[Recipe]:
        logger.info(f"Generating recipes for category: {category}")
        drafts = await self._generate_with_retries(
            prompts.recipes_for_category_prompt(category, config.SEARCH_RESULTS),
            list[RecipeDraft],
            "Generate category recipes",
        )
        return [draft_to_recipe(d) for d in drafts]

    async def get_tip(self, recipe_name: str, step_description: str) -> str:
        try:
            text = await self._call_gemini(prompts.chefs_tip_prompt(recipe_name, step_description))
        except Exception as e:
            logger.warning(f"Error getting chef's tip: {e}")
            return TIP_FALLBACK
        return text.strip() or TIP_FALLBACK

    async def get_substitute(
        self, recipe_name: str, all_ingredients: list[str], missing: str
    ) -> SubstituteSuggestion:
        return await self._generate_with_retries(
            prompts.substitute_prompt(recipe_name, all_ingredients, missing),
            SubstituteSuggestion,
            "Ingredient substitute",
        )

    async def adapt_for_ingredients(
        self,
        recipe_name: str,
        original_ingredients: list[str],
        available_ingredients: list[str],
        steps: list[Step],
    ) -> IngredientAdaptation:
        return await self._generate_with_retries(
            prompts.ingredient_adaptation_prompt(recipe_name, original_ingredients, available_ingredients, steps),
            IngredientAdaptation,
            "Ingredient adaptation",
        )

    async def translate(self, recipe: Recipe, language: Language) -> RecipeTranslation:
        translation = await self._generate_with_retries(
            prompts.translation_prompt(recipe, language), RecipeTranslation, f"Translate to {language.value}"
        )
        if len(translation.steps) != len(recipe.steps):
            raise ValidationFailure(
                f"Translation returned {len(translation.steps)} steps, expected {len(recipe.steps)}"
            )
        # Timer durations are never taken from the model
        steps = [
            Step(description=translated.description, time=source.time)
            for translated, source in zip(translation.steps, recipe.steps)
        ]
        return translation.model_copy(update={"steps": steps})

    async def adapt_for_cooktop(
        self, steps: list[Step], cooktop: Cooktop, *, recipe_name: str = ""
    ) -> CooktopAdaptation:
        try:
            prompt = prompts.cooktop_prompt(recipe_name, steps, cooktop)
        except ValueError as e:
            raise GenerationFailure(str(e), cause=e) from e
        adaptation = await self._generate_with_retries(prompt, CooktopAdaptation, f"Adapt for {cooktop.value}")
        if len(adaptation.steps) == len(steps):
            adaptation = adaptation.model_copy(
                update={
                    "steps": [
                        Step(description=adapted.description, time=source.time)
                        for adapted, source in zip(adaptation.steps, steps)
                    ]
                }
            )
        return adaptation

    async def generate_image(self, name: str, description: str) -> str:
        logger.info(f"Generating image for {name!r}")
        try:
            response = await asyncio.to_thread(
                self.client.models.generate_images,
                model=self.image_model,
                prompt=prompts.image_prompt(name, description),
                config=types.GenerateImagesConfig(
                    number_of_images=1,
                    output_mime_type="image/jpeg",
                    aspect_ratio="4:3",
                ),
            )
        except Exception as e:
            logger.warning(f"Error generating recipe image: {e}")
            raise GenerationFailure(f"Image generation failed: {e}", cause=e) from e

        images = getattr(response, "generated_images", None) or []
        image_bytes = images[0].image.image_bytes if images and images[0].image else None
        if not image_bytes:
            raise GenerationFailure("Image model returned no image")
        return image_to_data_url(image_bytes)


def image_to_data_url(image_bytes: bytes) -> str:
    """Validate generated image bytes and encode them as a data URL.

    Raises:
        ValidationFailure: Not a JPEG/PNG, or larger than MAX_IMAGE_SIZE_MB.
    """
    kind = filetype.guess(image_bytes)
    if kind is None or kind.extension not in ("jpg", "jpeg", "png"):
        raise ValidationFailure(f"Unexpected image format: {kind.mime if kind else 'unknown'}")

    size_mb = len(image_bytes) / (1024 * 1024)
    if size_mb > config.MAX_IMAGE_SIZE_MB:
        raise ValidationFailure(f"Image size {size_mb:.2f}MB exceeds limit of {config.MAX_IMAGE_SIZE_MB}MB")

    return f"data:{kind.mime};base64,{base64.b64encode(image_bytes).decode('utf-8')}"
