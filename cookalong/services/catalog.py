"""Finding recipes to cook: the curated catalog plus generated ones.

RecipeCatalog is what the browse/search surfaces talk to. Generation
failures are turned into OperationResult messages here, like the state
layer does, so callers only render `result.message`.
"""

from typing import Optional

from cookalong.data.recipes import CATEGORIES, RECIPES
from cookalong.models.errors import GenerationFailure
from cookalong.models.models import Recipe
from cookalong.models.results import OperationResult
from cookalong.services.gateway import RecipeGenerationGateway
from cookalong.state.favorites import FavoritesStore
from cookalong.utils.logger import logger


def normalize_ingredients(ingredients: list[str]) -> list[str]:
    """Trim, lowercase and de-duplicate user-entered ingredients, keeping order."""
    seen = []
    for raw in ingredients:
        name = raw.strip().lower()
        if name and name not in seen:
            seen.append(name)
    return seen


class RecipeCatalog:
    """Static recipes, favorites and recipes generated during this run."""

    categories = CATEGORIES

    def __init__(
        self,
        gateway: RecipeGenerationGateway,
        *,
        favorites: Optional[FavoritesStore] = None,
        recipes: tuple[Recipe, ...] = RECIPES,
    ) -> None:
        self.gateway = gateway
        self.favorites = favorites
        self.recipes = recipes
        self._generated: dict[str, Recipe] = {}

    def find(self, recipe_id: str) -> Optional[Recipe]:
        """Look a recipe up by id: curated first, then favorites, then generated."""
        for recipe in self.recipes:
            if recipe.id == recipe_id:
                return recipe
        if self.favorites is not None:
            favorite = self.favorites.get(recipe_id)
            if favorite is not None:
                return favorite
        return self._generated.get(recipe_id)

    def search_static(self, query: str) -> list[Recipe]:
        needle = query.strip().lower()
        if not needle:
            return list(self.recipes)
        return [
            r
            for r in self.recipes
            if needle in r.name.lower() or needle in r.description.lower() or needle in r.category.lower()
        ]

    def _remember(self, recipes: list[Recipe]) -> None:
        for recipe in recipes:
            self._generated[recipe.id] = recipe

    async def generate_for_query(self, text: str) -> OperationResult[Recipe]:
        text = text.strip()
        if not text:
            return OperationResult.failure("Type a dish to search for.")
        try:
            recipe = await self.gateway.generate_from_query(text)
        except GenerationFailure as e:
            logger.error(f"Recipe generation for {text!r} failed: {e}")
            return OperationResult.failure(f'Sorry, we couldn\'t generate a recipe for "{text}".', error=e)
        self._remember([recipe])
        return OperationResult.success(recipe)

    async def generate_from_ingredients(self, ingredients: list[str]) -> OperationResult[Recipe]:
        ingredients = normalize_ingredients(ingredients)
        if not ingredients:
            return OperationResult.failure("Add at least one ingredient.")
        try:
            recipe = await self.gateway.generate_from_ingredients(ingredients)
        except GenerationFailure as e:
            logger.error(f"Recipe generation from ingredients failed: {e}")
            return OperationResult.failure("Sorry, we couldn't generate a recipe with those ingredients.", error=e)
        self._remember([recipe])
        return OperationResult.success(recipe)

    async def search(self, text: str) -> OperationResult[list[Recipe]]:
        """Generate several variations of a dish."""
        text = text.strip()
        if not text:
            return OperationResult.failure("Type a dish to search for.")
        try:
            recipes = await self.gateway.generate_from_search(text)
        except GenerationFailure as e:
            logger.error(f"Recipe search for {text!r} failed: {e}")
            return OperationResult.failure(f'Sorry, we couldn\'t find recipes for "{text}".', error=e)
        if not recipes:
            return OperationResult.failure(f'Sorry, we couldn\'t find recipes for "{text}".')
        self._remember(recipes)
        return OperationResult.success(recipes)

    async def browse_category(self, category: str) -> OperationResult[list[Recipe]]:
        message = f'Sorry, we couldn\'t find any recipes for the "{category}" category right now. Please try another one.'
        try:
            recipes = await self.gateway.generate_for_category(category)
        except GenerationFailure as e:
            logger.error(f"Category generation for {category!r} failed: {e}")
            return OperationResult.failure(message, error=e)
        if not recipes:
            return OperationResult.failure(message)
        self._remember(recipes)
        return OperationResult.success(recipes)
