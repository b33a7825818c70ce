# fitstore/utils/validators.py
from typing import Any, Type, TypeVar
from pydantic import BaseModel, ValidationError as PydanticValidationError
from ..errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

def describe_errors(exc: PydanticValidationError) -> str:
    """One client-facing sentence for a pydantic failure"""
    errors = exc.errors()
    if any(err["type"] == "missing" for err in errors):
        return "Missing required fields"

    first = errors[0]
    field = ".".join(str(part) for part in first["loc"])
    if field:
        return f"Invalid {field}: {first['msg']}"
    return first["msg"]

def parse_model(model_cls: Type[ModelT], data: Any) -> ModelT:
    """Validate a payload, raising the store's ValidationError"""
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return model_cls.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(describe_errors(e)) from e
