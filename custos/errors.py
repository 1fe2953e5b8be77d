"""Exception types raised by custos."""


class CustosError(Exception):
    """Base class for all custos errors."""


class ValidationError(CustosError):
    """Input was rejected before any write was attempted."""


class AuthError(CustosError):
    """Authentication failed or no session is available.

    The message is the provider's own text when one was returned.
    """


class StoreError(CustosError):
    """A read or write against the expense store failed."""


class ConfigError(CustosError):
    """Configuration is missing or invalid."""
