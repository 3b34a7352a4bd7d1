"""
Schema validation helpers
Turn pydantic errors into the per-field list returned to API clients.
"""

from typing import Any, Dict, List, Mapping, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from pznews.core.exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def field_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Flatten pydantic error dicts into [{field, message}] entries."""
    details = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        details.append({
            "field": ".".join(loc) or "__root__",
            "message": err.get("msg", "Invalid value"),
        })
    return details


def validate_payload(schema: Type[ModelT], data: Mapping[str, Any]) -> ModelT:
    """Validate an untyped mapping against a schema; every violation is reported."""
    try:
        return schema.model_validate(dict(data))
    except PydanticValidationError as e:
        raise ValidationError("Validation error", details=field_errors(e.errors()))


def ensure_model(schema: Type[ModelT], data: Any) -> ModelT:
    """Pass schema instances through, validate anything else."""
    if isinstance(data, schema):
        return data
    return validate_payload(schema, data)
