"""Recipe generation gateway contract.

The state layer only talks to this interface; GeminiRecipeGateway is the
production implementation and tests substitute mocks.
"""

from abc import ABC, abstractmethod

from cookalong.models.models import (
    Cooktop,
    CooktopAdaptation,
    IngredientAdaptation,
    Language,
    Recipe,
    RecipeTranslation,
    Step,
    SubstituteSuggestion,
)

TIP_FALLBACK = "Sorry, I couldn't get a tip right now. Please try again later."


class RecipeGenerationGateway(ABC):
    """External recipe generation capability.

    Every method except `get_tip` raises GenerationFailure (or its subclass
    ValidationFailure) when no usable data comes back. Every Recipe returned
    carries a freshly minted id and `is_generated=True`.
    """

    @abstractmethod
    async def generate_from_query(self, text: str) -> Recipe: ...

    @abstractmethod
    async def generate_from_ingredients(self, ingredients: list[str]) -> Recipe: ...

    @abstractmethod
    async def generate_from_search(self, text: str) -> list[Recipe]: ...

    @abstractmethod
    async def generate_for_category(self, category: str) -> list[Recipe]: ...

    @abstractmethod
    async def get_tip(self, recipe_name: str, step_description: str) -> str:
        """Never raises; returns TIP_FALLBACK on internal failure."""

    @abstractmethod
    async def get_substitute(
        self, recipe_name: str, all_ingredients: list[str], missing: str
    ) -> SubstituteSuggestion: ...

    @abstractmethod
    async def adapt_for_ingredients(
        self,
        recipe_name: str,
        original_ingredients: list[str],
        available_ingredients: list[str],
        steps: list[Step],
    ) -> IngredientAdaptation: ...

    @abstractmethod
    async def translate(self, recipe: Recipe, language: Language) -> RecipeTranslation:
        """Step `time` values pass through unchanged."""

    @abstractmethod
    async def adapt_for_cooktop(
        self, steps: list[Step], cooktop: Cooktop, *, recipe_name: str = ""
    ) -> CooktopAdaptation:
        """Step `time` values pass through unchanged."""

    @abstractmethod
    async def generate_image(self, name: str, description: str) -> str:
        """Returns an image URL or a `data:` URL."""
