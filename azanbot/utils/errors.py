"""Exception hierarchy."""


class AzanBotError(Exception):
    """Base class for application errors."""


class UserInputError(AzanBotError):
    """Input the user can correct (bad offset, unknown city, bad language)."""


class UpstreamError(AzanBotError):
    """A remote collaborator (geocoder, timezone API, astronomy) failed."""


class StaleInteractionError(AzanBotError):
    """The originating button press can no longer be acknowledged."""


class ConfigurationError(AzanBotError, ValueError):
    """A required setting or credential is missing."""
