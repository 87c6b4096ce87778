"""Account domain specific exceptions."""


class AccountError(Exception):
    """Base class for account domain errors."""


class AccountNotFoundError(AccountError):
    """Raised when the requested account cannot be found."""


class NetworkNotFoundError(AccountError):
    """Raised when no network is registered under the requested prefix."""
