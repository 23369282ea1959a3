from typing import Any, Mapping, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from pricebook.core.exceptions import ValidationError

M = TypeVar("M", bound=BaseModel)


def validate_payload(model: Type[M], payload: M | Mapping[str, Any], message: str) -> M:
    """Coerce a mapping into ``model``, raising the app's ValidationError."""
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(
            message,
            details=[
                {
                    "field": ".".join(str(p) for p in err["loc"]) or "__root__",
                    "message": err["msg"],
                }
                for err in exc.errors()
            ],
        )
