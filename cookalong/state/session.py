"""Cooking session state for one open recipe.

A RecipeSession tracks what the cook sees while following a recipe: the
working copy (possibly rewritten by the generator), step progress, the
ingredient checklist, a display-only translation overlay, the cooktop
selection and the active step's timer. The original recipe is never
modified and can always be restored with `reset_to_original()`.

Adaptation rules:
- Cooktop: the step list in effect when leaving the default cooktop is kept
  as a baseline. Every cooktop rewrite starts from it, and switching back to
  the default restores it exactly. A response for a cooktop that is no
  longer selected is discarded.
- Ingredients: one-shot. Once applied the checklist is inert (no toggles,
  substitutions or re-adaptation) until a full reset. The current steps are
  rewritten and the cooktop selection is kept, but the baseline is dropped
  so the pre-ingredient steps cannot come back.
- Images: a generated picture is shown on `working` and saved with the
  favorite; `original` keeps its own image.
- Translation: an overlay over `working`, never written back into it. Step
  times always come from `working`.

Async operations capture the session generation when they start. reset,
open and close advance it, so a response that arrives for an abandoned
session is logged and discarded instead of being applied.
"""

from enum import Enum
from typing import Callable, Optional

from cookalong.models.errors import GenerationFailure, ValidationFailure
from cookalong.models.models import (
    Cooktop,
    Language,
    Recipe,
    RecipeTranslation,
    SessionView,
    Step,
    SubstituteSuggestion,
)
from cookalong.models.results import OperationResult
from cookalong.services.gateway import TIP_FALLBACK, RecipeGenerationGateway
from cookalong.state.favorites import FavoritesStore
from cookalong.state.timer import StepTimer
from cookalong.utils.logger import log_context, logger

INGREDIENT_ADAPTATION_FAILED = "Sorry, the AI couldn't adapt the recipe. Please try again."
COOKTOP_ADAPTATION_FAILED = "Sorry, the AI couldn't adapt the recipe for your cooktop. Please try again."
TRANSLATION_FAILED = "Sorry, the AI couldn't translate the recipe. Please try again."
SUBSTITUTE_FAILED = "Sorry, the AI couldn't find a substitute. Please try again."
IMAGE_FAILED = "Sorry, the AI couldn't generate an image. Please try again."
ALREADY_MODIFIED = "This recipe has already been adapted to your ingredients. Reset it to start over."
STALE_RESPONSE = "The recipe changed before the response arrived; it was discarded."


class CooktopStatus(str, Enum):
    DEFAULT = "default"
    ADAPTING = "adapting"
    ADAPTED = "adapted"


class RecipeSession:
    """Mutable view state of a single recipe being cooked.

    Args:
        recipe: Recipe to open.
        gateway: Generator used for adaptations, translation, tips and images.
        favorites: Favorites store for `toggle_favorite` and image refresh.
        timer_factory: Builds the timer of the active step, called as
            `timer_factory(duration, on_complete)`.
    """

    def __init__(
        self,
        recipe: Recipe,
        gateway: RecipeGenerationGateway,
        *,
        favorites: Optional[FavoritesStore] = None,
        timer_factory: Callable[..., StepTimer] = StepTimer,
    ) -> None:
        self.gateway = gateway
        self.favorites = favorites
        self._timer_factory = timer_factory
        self._generation = 0
        self.busy: set[str] = set()
        self.timer: Optional[StepTimer] = None
        self.closed = False
        self._load(recipe)

    # ==================================================================
    # Lifecycle
    # ==================================================================

    def _load(self, recipe: Recipe) -> None:
        self.original = recipe
        self.working = recipe
        self.completed_steps: set[int] = set()
        self.ingredient_checked: dict[str, bool] = {name: True for name in recipe.ingredients}
        self.is_recipe_modified = False
        self.language = Language.default()
        self.translation: Optional[RecipeTranslation] = None
        self.cooktop = Cooktop.default()
        self.cooktop_baseline: Optional[tuple[Step, ...]] = None
        self.cooktop_status = CooktopStatus.DEFAULT
        self._activate(None)

    def _abandon_in_flight(self) -> None:
        self._generation += 1
        self.busy.clear()

    def open(self, recipe: Recipe) -> None:
        """Switch to another recipe; all session state starts over."""
        self._abandon_in_flight()
        self.closed = False
        self._load(recipe)
        logger.info(f"Opened recipe '{recipe.name}'", extra={"recipe_id": recipe.id})

    def reset_to_original(self) -> None:
        self._abandon_in_flight()
        self._load(self.original)
        logger.info("Recipe reset to original", extra={"recipe_id": self.original.id})

    def close(self) -> None:
        """Tear down the timer and abandon in-flight requests."""
        self._abandon_in_flight()
        if self.timer is not None:
            self.timer.dispose()
            self.timer = None
        self.closed = True

    # ==================================================================
    # Derived state
    # ==================================================================

    @property
    def checklist_enabled(self) -> bool:
        return not self.is_recipe_modified

    @property
    def checked_ingredients(self) -> list[str]:
        return [name for name in self.working.ingredients if self.ingredient_checked.get(name, False)]

    @property
    def display(self) -> SessionView:
        """The working recipe with the translation overlay applied."""
        name, description, ingredients = self.working.name, self.working.description, self.working.ingredients
        steps = self.working.steps
        if self.translation is not None:
            name = self.translation.name
            description = self.translation.description
            ingredients = tuple(self.translation.ingredients)
            steps = tuple(
                Step(description=translated.description, time=step.time)
                for translated, step in zip(self.translation.steps, self.working.steps)
            )
        return SessionView(
            recipe_id=self.working.id,
            name=name,
            description=description,
            language=self.language,
            cooktop=self.cooktop,
            ingredients=ingredients,
            steps=steps,
            active_step_index=self.active_step_index,
            completed_steps=self.completed_steps,
        )

    # ==================================================================
    # Checklist and step progress
    # ==================================================================

    def toggle_ingredient_checked(self, name: str) -> bool:
        """Flip an ingredient's checked flag. Returns False if the toggle was ignored."""
        if self.is_recipe_modified:
            logger.warning(
                f"Ignoring checklist toggle for '{name}': recipe already adapted",
                extra={"recipe_id": self.original.id},
            )
            return False
        if name not in self.ingredient_checked:
            logger.warning(f"Unknown ingredient '{name}'", extra={"recipe_id": self.original.id})
            return False
        self.ingredient_checked[name] = not self.ingredient_checked[name]
        return True

    def toggle_step_expanded(self, index: int) -> Optional[int]:
        """Expand step `index`, or collapse it if already expanded. Returns the active index."""
        self._check_step_index(index)
        self._activate(None if self.active_step_index == index else index)
        return self.active_step_index

    def toggle_step_completed(self, index: int) -> bool:
        """Returns whether the step is now completed."""
        self._check_step_index(index)
        if index in self.completed_steps:
            self.completed_steps.discard(index)
            return False
        self.completed_steps.add(index)
        return True

    def go_to_next_step(self) -> Optional[int]:
        """Complete the active step and expand the following one."""
        if self.active_step_index is None:
            return None
        current = self.active_step_index
        self.completed_steps.add(current)
        following = current + 1
        self._activate(following if following < len(self.working.steps) else None)
        return self.active_step_index

    def _check_step_index(self, index: int) -> None:
        if not 0 <= index < len(self.working.steps):
            raise IndexError(f"Step index {index} out of range (0..{len(self.working.steps) - 1})")

    def _activate(self, index: Optional[int]) -> None:
        """Make `index` the active step and give it a fresh timer."""
        if self.timer is not None:
            self.timer.dispose()
        self.timer = None
        self.active_step_index = index
        self.next_step_prompt = False

        if index is None:
            return
        duration = self.working.steps[index].time
        if duration > 0:
            self.timer = self._timer_factory(duration, lambda: self._on_timer_complete(index))

    def _on_timer_complete(self, index: int) -> None:
        if index != self.active_step_index:
            return
        logger.info(f"Timer finished for step {index + 1}", extra=log_context(self.original.id, operation="timer"))
        if index + 1 < len(self.working.steps):
            self.next_step_prompt = True

    # ==================================================================
    # Working recipe rewrites
    # ==================================================================

    def _rewrite(self, steps: tuple[Step, ...], ingredients: Optional[tuple[str, ...]] = None) -> None:
        update = {"steps": steps}
        if ingredients is not None:
            update["ingredients"] = ingredients
        self.working = self.working.model_copy(update=update)
        self.completed_steps.clear()
        self._activate(None)
        self._drop_translation("steps rewritten")

    def _drop_translation(self, reason: str) -> None:
        if self.translation is None:
            return
        logger.info(f"Translation overlay dropped ({reason})", extra={"recipe_id": self.original.id})
        self.translation = None
        self.language = Language.default()

    def _begin(self, operation: str) -> int:
        self.busy.add(operation)
        return self._generation

    def _finish(self, operation: str, token: int) -> bool:
        """Clear the busy flag. Returns False if the response belongs to an abandoned session."""
        if token != self._generation:
            logger.info(
                f"Discarding stale {operation} response",
                extra=log_context(self.original.id, operation=operation),
            )
            return False
        self.busy.discard(operation)
        return True

    # ==================================================================
    # Generator-backed operations
    # ==================================================================

    async def request_ingredient_adaptation(self) -> OperationResult[Recipe]:
        """Rewrite the recipe around the checked ingredients."""
        if self.is_recipe_modified:
            return OperationResult.failure(ALREADY_MODIFIED)
        checked = self.checked_ingredients
        if not checked:
            return OperationResult.failure("Check at least one ingredient you have.")
        if len(checked) == len(self.working.ingredients):
            return OperationResult.failure("Uncheck the ingredients you don't have to adapt the recipe.")

        previous = self.working
        token = self._begin("ingredients")
        try:
            adaptation = await self.gateway.adapt_for_ingredients(
                self.working.name, list(self.working.ingredients), checked, list(self.working.steps)
            )
        except GenerationFailure as e:
            if not self._finish("ingredients", token):
                return OperationResult.failure(STALE_RESPONSE)
            self.completed_steps.clear()
            logger.error(
                f"Ingredient adaptation failed: {e}",
                extra=log_context(self.original.id, operation="ingredients"),
            )
            return OperationResult.failure(INGREDIENT_ADAPTATION_FAILED, error=e, previous=previous)

        if not self._finish("ingredients", token):
            return OperationResult.failure(STALE_RESPONSE)

        ingredients = tuple(adaptation.ingredients)
        self._rewrite(tuple(adaptation.steps), ingredients)
        self.ingredient_checked = {name: True for name in ingredients}
        self.is_recipe_modified = True
        # The baseline predates the new ingredients; the adapted steps become
        # the next baseline and the cooktop selection stays as it is
        self.cooktop_baseline = None
        logger.info(
            "Recipe adapted to available ingredients",
            extra=log_context(self.original.id, operation="ingredients"),
        )
        return OperationResult.success(self.working, previous=previous)

    async def request_cooktop_adaptation(self, target: Cooktop) -> OperationResult[tuple[Step, ...]]:
        """Rewrite the steps for `target`, or restore the baseline for the default cooktop."""
        if target == self.cooktop:
            return OperationResult.unchanged(self.working.steps)

        previous = self.cooktop
        self.completed_steps.clear()

        if target == Cooktop.default():
            baseline = self.cooktop_baseline
            self.cooktop = target
            self.cooktop_baseline = None
            self.cooktop_status = CooktopStatus.DEFAULT
            if baseline is not None:
                self._rewrite(baseline)
            return OperationResult.success(self.working.steps, previous=previous)

        if self.cooktop_baseline is None:
            self.cooktop_baseline = self.working.steps
        self.cooktop = target
        self.cooktop_status = CooktopStatus.ADAPTING

        token = self._begin("cooktop")
        try:
            adaptation = await self.gateway.adapt_for_cooktop(
                list(self.cooktop_baseline), target, recipe_name=self.working.name
            )
        except GenerationFailure as e:
            if not self._finish("cooktop", token) or not self._still_selected(target):
                return OperationResult.failure(STALE_RESPONSE)
            self.cooktop = previous
            if previous == Cooktop.default():
                self.cooktop_baseline = None
                self.cooktop_status = CooktopStatus.DEFAULT
            else:
                self.cooktop_status = CooktopStatus.ADAPTED
            logger.error(
                f"Cooktop adaptation to {target.value} failed: {e}",
                extra=log_context(self.original.id, operation="cooktop"),
            )
            return OperationResult.failure(COOKTOP_ADAPTATION_FAILED, error=e, previous=previous)

        if not self._finish("cooktop", token) or not self._still_selected(target):
            return OperationResult.failure(STALE_RESPONSE)

        self._rewrite(tuple(adaptation.steps))
        self.cooktop_status = CooktopStatus.ADAPTED
        logger.info(f"Steps adapted for {target.value}", extra=log_context(self.original.id, operation="cooktop"))
        return OperationResult.success(self.working.steps, previous=previous)

    def _still_selected(self, target: Cooktop) -> bool:
        """False when the cook picked another cooktop while `target` was being adapted."""
        if self.cooktop == target:
            return True
        logger.info(
            f"Discarding {target.value} steps, {self.cooktop.value} is selected now",
            extra=log_context(self.original.id, operation="cooktop"),
        )
        return False

    async def request_translation(self, language: Language) -> OperationResult[SessionView]:
        if language == self.language:
            return OperationResult.unchanged(self.display)

        previous_language, previous_overlay = self.language, self.translation
        if language == Language.default():
            self.language = language
            self.translation = None
            return OperationResult.success(self.display, previous=previous_language)

        self.language = language
        source = self.working
        token = self._begin("translation")
        try:
            translation = await self.gateway.translate(source, language)
            if len(translation.steps) != len(source.steps):
                raise ValidationFailure(
                    f"Translation returned {len(translation.steps)} steps for {len(source.steps)}"
                )
        except GenerationFailure as e:
            if not self._finish("translation", token):
                return OperationResult.failure(STALE_RESPONSE)
            if self.working is source:
                self.language = previous_language
                self.translation = previous_overlay
            else:
                self.language = Language.default()
            logger.error(
                f"Translation to {language.value} failed: {e}",
                extra=log_context(self.original.id, operation="translation"),
            )
            return OperationResult.failure(TRANSLATION_FAILED, error=e, previous=previous_language)

        if not self._finish("translation", token):
            return OperationResult.failure(STALE_RESPONSE)
        if self.working is not source:
            logger.info("Discarding translation of a superseded recipe version", extra={"recipe_id": source.id})
            self.language = Language.default()
            return OperationResult.failure(STALE_RESPONSE)

        self.translation = translation.model_copy(
            update={
                "steps": [
                    Step(description=translated.description, time=step.time)
                    for translated, step in zip(translation.steps, source.steps)
                ]
            }
        )
        return OperationResult.success(self.display, previous=previous_language)

    async def request_substitute(self, name: str) -> OperationResult[SubstituteSuggestion]:
        """Ask for a replacement for a missing ingredient. Does not change the session."""
        if self.is_recipe_modified:
            return OperationResult.failure(ALREADY_MODIFIED)

        token = self._begin("substitute")
        try:
            suggestion = await self.gateway.get_substitute(self.working.name, list(self.working.ingredients), name)
        except GenerationFailure as e:
            if not self._finish("substitute", token):
                return OperationResult.failure(STALE_RESPONSE)
            logger.error(
                f"Substitute for '{name}' failed: {e}",
                extra=log_context(self.original.id, operation="substitute"),
            )
            return OperationResult.failure(SUBSTITUTE_FAILED, error=e)

        if not self._finish("substitute", token):
            return OperationResult.failure(STALE_RESPONSE)
        return OperationResult.success(suggestion)

    def apply_substitute(self, old: str, new: str) -> OperationResult[Recipe]:
        """Replace ingredient `old` with `new` in the working recipe."""
        if self.is_recipe_modified:
            return OperationResult.failure(ALREADY_MODIFIED)
        new = new.strip()
        if old not in self.working.ingredients:
            return OperationResult.failure(f"'{old}' is not an ingredient of this recipe.")
        if not new:
            return OperationResult.failure("The substitute cannot be empty.")

        previous = self.working
        self.working = self.working.model_copy(
            update={"ingredients": tuple(new if name == old else name for name in self.working.ingredients)}
        )
        self.ingredient_checked = {
            (new if name == old else name): (True if name == old else checked)
            for name, checked in self.ingredient_checked.items()
        }
        self._drop_translation("ingredients changed")
        return OperationResult.success(self.working, previous=previous)

    async def request_tip(self, step_index: int) -> str:
        """Chef's tip for a step. Never fails."""
        self._check_step_index(step_index)
        token = self._begin("tip")
        try:
            return await self.gateway.get_tip(self.working.name, self.working.steps[step_index].description)
        except GenerationFailure as e:
            logger.warning(f"Tip request failed: {e}", extra=log_context(self.original.id, operation="tip"))
            return TIP_FALLBACK
        finally:
            self._finish("tip", token)

    async def request_image(self) -> OperationResult[str]:
        """Generate a picture of the dish; stored on favorites when favorited."""
        token = self._begin("image")
        try:
            image_url = await self.gateway.generate_image(self.working.name, self.working.description)
        except GenerationFailure as e:
            if not self._finish("image", token):
                return OperationResult.failure(STALE_RESPONSE)
            logger.error(f"Image generation failed: {e}", extra=log_context(self.original.id, operation="image"))
            return OperationResult.failure(IMAGE_FAILED, error=e)

        if not self._finish("image", token):
            return OperationResult.failure(STALE_RESPONSE)

        previous = self.working.image_url
        self.working = self.working.model_copy(update={"image_url": image_url})

        if self.favorites is not None and self.favorites.is_favorite(self.original.id):
            result = await self.favorites.refresh(self.favorite_record)
            if not result:
                logger.warning(
                    f"Image generated but favorite not updated: {result.message}",
                    extra=log_context(self.original.id, operation="image"),
                )
        return OperationResult.success(image_url, previous=previous)

    @property
    def favorite_record(self) -> Recipe:
        """What gets favorited: the original dish, with the picture generated for it."""
        if self.working.image_url == self.original.image_url:
            return self.original
        return self.original.model_copy(update={"image_url": self.working.image_url})

    async def toggle_favorite(self) -> OperationResult:
        if self.favorites is None:
            return OperationResult.failure("Favorites are not available.")
        if self.favorites.is_favorite(self.original.id):
            return await self.favorites.remove(self.original.id)
        return await self.favorites.add(self.favorite_record)
