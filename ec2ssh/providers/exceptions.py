"""Provider-neutral exceptions raised by cloud inventory clients."""

from __future__ import annotations


class ProviderError(Exception):
    """Base class for errors raised while talking to a cloud provider.

    Parameters
    ----------
    message : str
        Human readable error message
    error_code : str | None
        Provider error code when one is available (e.g. ``ExpiredToken``)
    """

    def __init__(self, message: str, error_code: str | None = None) -> None:
        super().__init__(message)
        self.error_code = error_code


class ProviderCredentialsError(ProviderError):
    """Credentials are missing, invalid or expired."""


class ProviderAPIError(ProviderError):
    """The provider API rejected a request."""


class ProviderConnectionError(ProviderError):
    """The provider endpoint could not be reached."""
