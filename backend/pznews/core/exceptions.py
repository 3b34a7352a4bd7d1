from typing import Any, Dict, List, Optional


class PZNewsException(Exception):
    """Base error for service-layer failures"""
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, payload: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.payload = payload

    def to_dict(self) -> Dict[str, Any]:
        rv = dict(self.payload or ())
        rv["error"] = self.message
        return rv


class ValidationError(PZNewsException):
    """Input failed schema checks; carries one entry per offending field"""
    status_code = 400
    default_message = "Validation error"

    def __init__(self, message: Optional[str] = None, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.details = details or []

    def to_dict(self) -> Dict[str, Any]:
        rv = super().to_dict()
        if self.details:
            rv["details"] = self.details
        return rv


class NotFound(PZNewsException):
    status_code = 404
    default_message = "Not found"


class Conflict(PZNewsException):
    """Slug collision or a delete blocked by a referential guard"""
    status_code = 400
    default_message = "Conflict"


class PermissionDenied(PZNewsException):
    status_code = 403
    default_message = "Permission denied"


class UpstreamFailure(PZNewsException):
    """The store or object storage call itself failed"""
    status_code = 500
    default_message = "Upstream service failure"
