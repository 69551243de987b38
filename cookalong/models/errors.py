"""Error taxonomy for the cook-along service.

FetchError subclasses come from the remote favorites store, GenerationFailure
subclasses from the recipe generator. Both are recovered where the operation
was invoked (FavoritesStore, RecipeSession) and turned into an
OperationResult with a human-readable message.
"""

from typing import Optional


class CookalongError(Exception):
    """Base class for all service errors."""

    # Message shown to the user when the error reaches the state layer
    user_message = "Something went wrong. Please try again."

    def __init__(self, message: str, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class FetchError(CookalongError):
    """The remote favorites store could not serve a request."""

    user_message = "An error occurred while talking to the favorites service."


class ConnectivityError(FetchError):
    """Remote store unreachable or request failed in transit (transient)."""

    user_message = "Could not reach the favorites service. Please try again later."


class SchemaMissingError(FetchError):
    """Remote store is configured but the favorites table does not exist."""

    user_message = (
        "Database Setup Required: Could not connect to your favorites collection. "
        "This might be a database configuration issue."
    )


class GenerationFailure(CookalongError):
    """Recipe generator returned no usable data or the request failed."""

    user_message = "Sorry, the AI couldn't complete the request. Please try again."


class ValidationFailure(GenerationFailure):
    """Generator response parsed but did not match the expected structure."""

    user_message = "Sorry, the AI returned an incomplete answer. Please try again."


class LocalStorageError(CookalongError):
    """Guest favorites could not be written to local storage."""

    user_message = "Could not save your favorites on this device."
