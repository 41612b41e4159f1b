from __future__ import annotations


class PageQueryError(Exception):
    """Base class for pagequery specific exceptions."""


class ParsingError(PageQueryError):
    """Raised when an LLM response does not contain a usable JSON payload."""


class LLMError(PageQueryError):
    """Raised when an LLM provider returns an error."""


class BrowserError(PageQueryError):
    """Raised for Playwright session failures."""


class ConfigurationError(PageQueryError):
    """Raised when a query is issued without a usable LLM configuration."""


class StampingError(PageQueryError):
    """Raised when elements cannot be given addresses."""


class AddressSpaceExhausted(StampingError):
    """Raised when a generator has no unused addresses left."""
