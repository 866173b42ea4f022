from typing import Any, Dict


class SearchError(Exception):
    """Base error for search and replace failures."""


class SearchQueryError(SearchError):
    """Raised when a query fragment cannot be built."""


class SearchSourceError(SearchError):
    """Raised when a source cannot service a request."""


class SchemaError(ValueError):
    """Raised when a source schema definition cannot be parsed or validated."""


class SaveError(SearchError):
    """Raised when a write to the underlying store fails."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self):
        return f"{self.code}: {self.message}"

    def to_json(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}
