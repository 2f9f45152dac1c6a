from typing import Optional, Set, Tuple, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from voyage.exceptions import ValidationError
from voyage.uploads.staging import StagingArea

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_form_payload(schema: Type[ModelT], raw: Optional[str]) -> ModelT:
    """Validate the JSON ``data`` part of a multipart request against ``schema``."""
    try:
        return schema.model_validate_json(raw or "{}")
    except PydanticValidationError as e:
        errors = {}
        for error in e.errors():
            key = ".".join(str(part) for part in error["loc"]) or "data"
            errors.setdefault(key, []).append(error["msg"])
        raise ValidationError(errors=errors)


def explicit_nulls(payload: BaseModel, fields: Tuple[str, ...]) -> Set[str]:
    """Attachment fields the client explicitly sent as null."""
    return {name for name in fields if name in payload.model_fields_set and getattr(payload, name) is None}


def validate_multipart(schema: Type[ModelT], raw: Optional[str], staging: StagingArea) -> ModelT:
    """Validate body and staged files together so the client sees every error at once."""
    errors = {key: list(messages) for key, messages in staging.errors.items()}
    payload = None
    try:
        payload = parse_form_payload(schema, raw)
    except ValidationError as e:
        for key, messages in e.errors.items():
            errors.setdefault(key, []).extend(messages)
    if errors:
        raise ValidationError(errors=errors)
    return payload
