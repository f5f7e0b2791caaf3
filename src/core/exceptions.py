"""
Catalog-Search-Service - Custom Exceptions

Anti-Patterns Avoided:
- Exception shadowing: QueryValidationError instead of a bare ValidationError,
  which would collide with pydantic.ValidationError in the API layer
"""


class CatalogSearchError(Exception):
    """Base exception for Catalog-Search-Service.

    All custom exceptions inherit from this base class.
    """
    pass


class QueryValidationError(CatalogSearchError):
    """Raised when a search query violates its input contract.

    Covers empty query text, non-positive limit and out-of-range threshold.
    Never retried internally; surfaced to the caller as-is.

    Attributes:
        field: Name of the offending query field
        message: Human-readable error description
    """

    def __init__(self, field: str, message: str) -> None:
        """Initialize QueryValidationError.

        Args:
            field: Name of the offending query field
            message: Human-readable description of the error
        """
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class ConfigurationError(CatalogSearchError):
    """Raised when configuration is invalid or missing.

    Fatal at engine construction (no fields, all-zero weights).
    """
    pass
