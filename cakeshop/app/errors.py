"""Error taxonomy shared by the lifecycle manager and the HTTP layer.

Every error carries the HTTP status it is surfaced with; the handlers in
``main.py`` turn them into ``{"success": false, "error": ...}`` bodies.
"""
from typing import Dict, Any, List, Optional


class CakeShopError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"success": False, "error": self.message}


class ValidationError(CakeShopError):
    """Missing or malformed input; ``fields`` names the offending fields."""
    status_code = 400

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = list(fields or [])

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["fields"] = self.fields
        return body


class AuthenticationError(CakeShopError):
    status_code = 401


class AuthorizationError(CakeShopError):
    status_code = 403


class NotFoundError(CakeShopError):
    status_code = 404


class ConflictError(CakeShopError):
    status_code = 409


class PersistenceError(CakeShopError):
    status_code = 500
