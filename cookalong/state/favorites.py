"""Favorites for the current identity.

Presents one logical favorites set whether it is persisted remotely
(authenticated users, Supabase) or on this device (guests), and migrates
guest favorites into the remote store on every login.

Mutations are optimistic: the in-memory set changes first, then the change
is persisted; on failure the set is rolled back and a failed
OperationResult is returned. Nothing here raises to the caller.
"""

from typing import Optional

from cookalong.models.errors import CookalongError, FetchError, SchemaMissingError
from cookalong.models.models import Recipe
from cookalong.models.results import OperationResult
from cookalong.state.identity import Identity
from cookalong.storage.local import GuestFavoritesFile
from cookalong.storage.remote import FavoritesRepository, SupabaseFavoritesRepository
from cookalong.utils.logger import log_context, logger


class FavoritesStore:
    """Favorites set scoped to one identity at a time.

    Attributes:
        identity: Current owner of the favorites set.
        loading: True while a remote fetch is in flight.
        error: Human-readable message of the last failed load, or None.
        setup_required: True when the last load failed because the remote
            table is missing, as opposed to a transient failure.
    """

    def __init__(
        self,
        identity: Optional[Identity] = None,
        *,
        repository: Optional[FavoritesRepository] = None,
        guest_file: Optional[GuestFavoritesFile] = None,
    ) -> None:
        self.identity = identity or Identity.anonymous()
        self._repository = repository
        self.guest_file = guest_file or GuestFavoritesFile()
        self._favorites: list[Recipe] = []
        self.loading = False
        self.error: Optional[str] = None
        self.setup_required = False

    @property
    def repository(self) -> FavoritesRepository:
        if self._repository is None:
            self._repository = SupabaseFavoritesRepository()
        return self._repository

    @property
    def favorites(self) -> tuple[Recipe, ...]:
        return tuple(self._favorites)

    def is_favorite(self, recipe_id: str) -> bool:
        return any(r.id == recipe_id for r in self._favorites)

    def get(self, recipe_id: str) -> Optional[Recipe]:
        return next((r for r in self._favorites if r.id == recipe_id), None)

    async def set_identity(self, identity: Identity) -> OperationResult[tuple[Recipe, ...]]:
        """Switch to a new identity, merging guest favorites on login.

        A failed merge is reported like a failed load: the result fails and
        `error` holds its message, although the remote set is still loaded.
        """
        previous = self.identity
        self.identity = identity

        merged = None
        if identity.is_authenticated and not previous.is_authenticated:
            merged = await self.merge_on_login(identity)

        loaded = await self.load(identity)
        if loaded and merged is not None and not merged:
            self.error = merged.message
            return OperationResult.failure(merged.message, error=merged.error, previous=loaded.value)
        return loaded

    async def load(self, identity: Optional[Identity] = None) -> OperationResult[tuple[Recipe, ...]]:
        """Replace the in-memory set with the persisted favorites of `identity`."""
        if identity is not None:
            self.identity = identity
        identity = self.identity

        self.error = None
        self.setup_required = False

        if identity.is_authenticated:
            self.loading = True
            try:
                recipes = await self.repository.fetch(identity.user_id)
            except FetchError as e:
                self._favorites = []
                self._record_load_error(e)
                return OperationResult.failure(self.error, error=e, previous=())
            finally:
                self.loading = False
        elif identity.is_guest:
            recipes = self.guest_file.read()
        else:
            recipes = []

        self._favorites = _dedupe(recipes)
        logger.info(
            f"Loaded {len(self._favorites)} favorites for {identity.kind.value} identity",
            extra=log_context(user_id=identity.user_id, operation="load"),
        )
        return OperationResult.success(self.favorites)

    async def add(self, recipe: Recipe) -> OperationResult[tuple[Recipe, ...]]:
        if self.is_favorite(recipe.id):
            return OperationResult.unchanged(self.favorites)

        before = list(self._favorites)
        self._favorites.append(recipe)
        return await self._persist(
            before,
            remote=lambda repo, uid: repo.upsert(uid, recipe),
            operation="add",
            recipe_id=recipe.id,
        )

    async def remove(self, recipe_id: str) -> OperationResult[tuple[Recipe, ...]]:
        if not self.is_favorite(recipe_id):
            return OperationResult.unchanged(self.favorites)

        before = list(self._favorites)
        self._favorites = [r for r in self._favorites if r.id != recipe_id]
        return await self._persist(
            before,
            remote=lambda repo, uid: repo.delete(uid, recipe_id),
            operation="remove",
            recipe_id=recipe_id,
        )

    async def refresh(self, recipe: Recipe) -> OperationResult[tuple[Recipe, ...]]:
        """Store updated fields (e.g. a new image) of an already-favorited recipe."""
        if not self.is_favorite(recipe.id):
            return OperationResult.unchanged(self.favorites)

        before = list(self._favorites)
        self._favorites = [recipe if r.id == recipe.id else r for r in self._favorites]
        return await self._persist(
            before,
            remote=lambda repo, uid: repo.upsert(uid, recipe),
            operation="refresh",
            recipe_id=recipe.id,
        )

    async def merge_on_login(self, identity: Identity) -> OperationResult[int]:
        """Move guest favorites into the remote store for `identity`.

        `set_identity` calls this once per transition to an authenticated
        identity. Entries missing remotely are inserted, then the guest list
        is cleared whatever the outcome.

        Returns:
            Number of entries inserted remotely.
        """
        if not identity.is_authenticated:
            raise ValueError("merge_on_login requires an authenticated identity")

        local = self.guest_file.read()
        if not local:
            self.guest_file.clear()
            return OperationResult.unchanged(0)

        try:
            remote_ids = {r.id for r in await self.repository.fetch(identity.user_id)}
            missing = [r for r in _dedupe(local) if r.id not in remote_ids]
            await self.repository.insert_many(identity.user_id, missing)
        except FetchError as e:
            logger.error(
                f"Error merging guest favorites: {e}",
                extra=log_context(user_id=identity.user_id, operation="merge"),
            )
            return OperationResult.failure(e.user_message, error=e)
        finally:
            self.guest_file.clear()

        logger.info(
            f"Merged {len(missing)} of {len(local)} guest favorites",
            extra=log_context(user_id=identity.user_id, operation="merge"),
        )
        return OperationResult.success(len(missing))

    async def _persist(self, before, *, remote, operation: str, recipe_id: str):
        identity = self.identity
        try:
            if identity.is_authenticated:
                await remote(self.repository, identity.user_id)
            elif identity.is_guest:
                self.guest_file.write(self._favorites)
        except CookalongError as e:
            self._favorites = before
            logger.error(
                f"Favorite {operation} failed, rolled back: {e}",
                extra=log_context(recipe_id, identity.user_id, operation),
            )
            return OperationResult.failure(e.user_message, error=e, previous=tuple(before))

        return OperationResult.success(self.favorites, previous=tuple(before))

    def _record_load_error(self, error: FetchError) -> None:
        self.setup_required = isinstance(error, SchemaMissingError)
        self.error = error.user_message
        logger.error(
            f"Error fetching favorites: {error}",
            extra=log_context(user_id=self.identity.user_id, operation="load"),
        )


def _dedupe(recipes: list[Recipe]) -> list[Recipe]:
    seen: set[str] = set()
    unique = []
    for recipe in recipes:
        if recipe.id not in seen:
            seen.add(recipe.id)
            unique.append(recipe)
    return unique
