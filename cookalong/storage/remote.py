"""Remote favorites for authenticated users.

Records live in the `user_favorites` table keyed by (user_id, recipe_id) and
store the full recipe verbatim in `recipe_data`, so a favorite stays
renderable even if the curated catalog changes.

supabase-py is synchronous; calls run through asyncio.to_thread.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

import httpx
from pydantic import ValidationError
from supabase import Client, PostgrestAPIError, create_client

from cookalong.models.errors import ConnectivityError, FetchError, SchemaMissingError
from cookalong.models.models import Recipe
from cookalong.utils.config import config
from cookalong.utils.logger import logger

# PostgREST: relation not found in the schema cache
MISSING_TABLE_CODES = ("PGRST205", "42P01")


class FavoritesRepository(ABC):
    """Remote store of favorite records for one user at a time."""

    @abstractmethod
    async def fetch(self, user_id: str) -> list[Recipe]: ...

    @abstractmethod
    async def upsert(self, user_id: str, recipe: Recipe) -> None: ...

    @abstractmethod
    async def delete(self, user_id: str, recipe_id: str) -> None: ...

    @abstractmethod
    async def insert_many(self, user_id: str, recipes: list[Recipe]) -> None: ...


def classify_remote_error(exception: Exception, table: str) -> FetchError:
    """Map a Supabase/transport exception onto the FetchError taxonomy."""
    if isinstance(exception, PostgrestAPIError):
        message = getattr(exception, "message", None) or str(exception)
        if exception.code in MISSING_TABLE_CODES or f'relation "{table}" does not exist' in message:
            return SchemaMissingError(f"Favorites table '{table}' is missing: {message}", cause=exception)
        return FetchError(f"Favorites request rejected ({exception.code}): {message}", cause=exception)
    if isinstance(exception, (httpx.HTTPError, ConnectionError, TimeoutError)):
        return ConnectivityError(f"Favorites service unreachable: {exception}", cause=exception)
    return FetchError(f"Favorites request failed: {exception}", cause=exception)


class SupabaseFavoritesRepository(FavoritesRepository):
    """FavoritesRepository backed by a Supabase table."""

    def __init__(self, client: Optional[Client] = None, table: Optional[str] = None) -> None:
        """Initialize the repository.

        Args:
            client: Authenticated Supabase client. Built from SUPABASE_URL/SUPABASE_ANON_KEY if None.
            table: Table name. Defaults to config.FAVORITES_TABLE.

        Raises:
            ValueError: If no client is given and Supabase credentials are not configured.
        """
        if client is None:
            if not (config.SUPABASE_URL and config.SUPABASE_ANON_KEY):
                raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY are required")
            client = create_client(config.SUPABASE_URL, config.SUPABASE_ANON_KEY)
        self.client = client
        self.table = table or config.FAVORITES_TABLE

    async def _execute(self, operation: str, build: Callable[[], Any]) -> Any:
        try:
            response = await asyncio.to_thread(lambda: build().execute())
        except Exception as e:
            error = classify_remote_error(e, self.table)
            logger.error(f"{operation} failed: {error}")
            raise error from e
        return response

    async def fetch(self, user_id: str) -> list[Recipe]:
        response = await self._execute(
            "Fetch favorites",
            lambda: self.client.table(self.table).select("recipe_data").eq("user_id", user_id),
        )
        recipes = []
        for row in response.data or []:
            try:
                recipes.append(Recipe.from_record(row["recipe_data"]))
            except (KeyError, TypeError, ValidationError) as e:
                logger.warning(f"Skipping unreadable favorite record for user {user_id}: {e}")
        logger.debug(f"Fetched {len(recipes)} remote favorites", extra={"user_id": user_id})
        return recipes

    async def upsert(self, user_id: str, recipe: Recipe) -> None:
        await self._execute(
            "Upsert favorite",
            lambda: self.client.table(self.table).upsert(
                self._record(user_id, recipe), on_conflict="user_id,recipe_id"
            ),
        )

    async def delete(self, user_id: str, recipe_id: str) -> None:
        await self._execute(
            "Delete favorite",
            lambda: self.client.table(self.table).delete().match({"user_id": user_id, "recipe_id": recipe_id}),
        )

    async def insert_many(self, user_id: str, recipes: list[Recipe]) -> None:
        if not recipes:
            return
        await self._execute(
            "Insert favorites",
            lambda: self.client.table(self.table).insert([self._record(user_id, r) for r in recipes]),
        )

    @staticmethod
    def _record(user_id: str, recipe: Recipe) -> dict:
        return {"user_id": user_id, "recipe_id": recipe.id, "recipe_data": recipe.to_record()}
