"""Input validation.

Ability inputs are pydantic models (see ``schemas.io``). ``validate`` runs a
caller-supplied object through one and turns the first pydantic error into a
``ValidationFailed`` naming the offending field.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence, Type, Union

from pydantic import BaseModel, ValidationError

from .errors import ValidationFailed

_TYPE_NAMES: Dict[str, str] = {
    "int_type": "integer",
    "int_from_float": "integer",
    "float_type": "number",
    "string_type": "string",
    "bool_type": "boolean",
    "list_type": "array",
    "dict_type": "object",
}


def clamp(value: Any, minimum: Optional[Any] = None, maximum: Optional[Any] = None) -> Any:
    """Coerce ``value`` into ``[minimum, maximum]``. Either bound may be ``None``.

    ``clamp(clamp(v, lo, hi), lo, hi) == clamp(v, lo, hi)`` for every ``v``.
    """
    if minimum is not None and value < minimum:
        value = minimum
    if maximum is not None and value > maximum:
        value = maximum
    return value


def _field_name(loc: Sequence[Union[str, int]]) -> str:
    if not loc:
        return "input"
    name = str(loc[0])
    for part in loc[1:]:
        name += f"[{part}]" if isinstance(part, int) else f".{part}"
    return name


def _reason(error: Mapping[str, Any]) -> str:
    kind = error["type"]
    ctx = error.get("ctx") or {}
    if kind == "missing":
        return "is required"
    if kind in _TYPE_NAMES:
        return f"must be of type {_TYPE_NAMES[kind]}"
    if kind == "literal_error":
        allowed = str(ctx.get("expected", "")).replace("'", "").replace(" or ", ", ")
        return f"must be one of: {allowed}"
    if kind == "too_short":
        return f"must contain at least {ctx.get('min_length')} item(s)"
    return str(error["msg"]).lower()


def validate(model: Type[BaseModel], raw_input: Any) -> Dict[str, Any]:
    """Validate ``raw_input`` against an ability input model.

    Args:
        model: The ability's ``AbilityInput`` subclass.
        raw_input: Caller-supplied input, normally a dict. ``None`` counts as ``{}``.

    Returns:
        A new dict holding the validated, clamped and defaulted fields.

    Raises:
        ValidationFailed: Naming the first offending field and the reason.
    """
    if raw_input is None:
        raw_input = {}
    if not isinstance(raw_input, Mapping):
        raise ValidationFailed("input", "must be an object")

    try:
        validated = model.model_validate(dict(raw_input))
    except ValidationError as exc:
        error = exc.errors()[0]
        raise ValidationFailed(_field_name(error["loc"]), _reason(error)) from None
    return validated.to_args()
