"""Custom exceptions used by provider adapters and the gateway."""

from __future__ import annotations


class ProviderError(RuntimeError):
    """Base error raised for provider failures."""


class ProviderConfigError(ProviderError):
    """Raised when configuration is missing or invalid."""


class ProviderResponseError(ProviderError):
    """Raised when a provider returns an unusable response."""


class ProviderTimeoutError(ProviderError):
    """Raised when a provider call exceeds the gateway timeout."""


class UnknownBackendError(ProviderError):
    """Raised when a backend id is not registered with the gateway."""
