"""Utility layer errors."""


class UtilError(Exception):
    """Base utility error."""

    pass


class ConfigurationError(UtilError):
    """Configuration error.

    Raised at startup when required settings (such as the sealing secret)
    are missing or unusable.
    """

    pass
