"""Shared fixtures for unit tests."""

from functools import partial
from unittest.mock import AsyncMock

import pytest

from cookalong.models.errors import FetchError
from cookalong.models.models import Recipe, Step
from cookalong.services.gateway import RecipeGenerationGateway
from cookalong.state.timer import StepTimer
from cookalong.storage.local import GuestFavoritesFile
from cookalong.storage.remote import FavoritesRepository


def make_recipe(recipe_id="r1", name="Masala Chai", **overrides) -> Recipe:
    fields = dict(
        id=recipe_id,
        name=name,
        description="Spiced milk tea.",
        category="Quick Meals",
        image_url="",
        ingredients=("2 cups water", "1 cup milk", "2 tsp tea leaves", "1 inch ginger"),
        steps=(
            Step(description="Boil the water with ginger on medium flame.", time=300),
            Step(description="Add tea leaves and simmer.", time=120),
            Step(description="Pour in milk and bring to a boil.", time=180),
            Step(description="Strain and serve.", time=0),
        ),
        prep_time=5,
        cook_time=10,
        servings=2,
    )
    fields.update(overrides)
    return Recipe(**fields)


class InMemoryFavoritesRepository(FavoritesRepository):
    """FavoritesRepository keeping rows in a dict, with switchable failures."""

    def __init__(self, rows=None):
        # user_id -> {recipe_id: Recipe}
        self.rows = rows or {}
        self.fail_with = None
        self.calls = []

    def _check(self, name):
        self.calls.append(name)
        if self.fail_with is not None:
            raise self.fail_with

    async def fetch(self, user_id):
        self._check("fetch")
        return list(self.rows.get(user_id, {}).values())

    async def upsert(self, user_id, recipe):
        self._check("upsert")
        self.rows.setdefault(user_id, {})[recipe.id] = recipe

    async def delete(self, user_id, recipe_id):
        self._check("delete")
        self.rows.get(user_id, {}).pop(recipe_id, None)

    async def insert_many(self, user_id, recipes):
        self._check("insert_many")
        for recipe in recipes:
            if recipe.id in self.rows.get(user_id, {}):
                raise FetchError(f"duplicate key {recipe.id}")
            self.rows.setdefault(user_id, {})[recipe.id] = recipe

    def ids(self, user_id):
        return set(self.rows.get(user_id, {}))


@pytest.fixture
def recipe():
    return make_recipe()


@pytest.fixture
def gateway():
    return AsyncMock(spec=RecipeGenerationGateway)


@pytest.fixture
def repository():
    return InMemoryFavoritesRepository()


@pytest.fixture
def guest_file(tmp_path):
    return GuestFavoritesFile(tmp_path / "recipeGuestFavorites.json")


@pytest.fixture
def manual_timer():
    """Timer factory whose timers are ticked by the test instead of a task."""
    return partial(StepTimer, auto_tick=False)


@pytest.fixture
def recipe_factory():
    return make_recipe
