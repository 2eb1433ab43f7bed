"""Exception types raised at the storage and loader boundaries."""


class FlashquizError(Exception):
    pass


class InvalidFlashcardError(FlashquizError, ValueError):
    """A flashcard, category or subcategory breaks a catalog invariant."""


class CatalogNotFoundError(FlashquizError, LookupError):
    """A category or subcategory slug does not resolve."""


class WebhookPayloadError(FlashquizError, ValueError):
    """An identity lifecycle event is missing required user data."""
