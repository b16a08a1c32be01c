"""Pydantic models for ability input and output.

Every ability declares an ``AbilityInput`` subclass for its input and an
``AbilityOutput`` subclass for its output. Both are published through
``model_json_schema()``.

Inputs are validated strictly: booleans are never integers and strings are
never numbers. A few field types relax that in fixed ways:

- ``Integer`` accepts integral floats such as ``2.0``,
- ``clamped_int(lo, hi)`` coerces integers into range instead of rejecting them,
- ``coerced_choice(choices, default)`` substitutes the default for a string
  outside ``choices``,
- ``truncated_list(item, max_items=n)`` drops items past ``n``.

``None`` counts as absent and unknown input fields are dropped.
"""

from typing import Annotated, Any, Dict, Iterable, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from ..validation import clamp
from .base import BaseSchema


def _integral(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


Integer = Annotated[int, BeforeValidator(_integral)]


def clamped_int(minimum: Optional[int] = None, maximum: Optional[int] = None) -> Any:
    """Integer type whose out-of-range values are clamped into ``[minimum, maximum]``."""
    bounds = {key: bound for key, bound in (("minimum", minimum), ("maximum", maximum)) if bound is not None}
    return Annotated[
        int,
        BeforeValidator(_integral),
        AfterValidator(lambda value: clamp(value, minimum, maximum)),
        Field(json_schema_extra=bounds),
    ]


def choice(values: Iterable[str]) -> Any:
    """String type restricted to ``values``."""
    return Literal[tuple(values)]


def coerced_choice(values: Iterable[str], default: str) -> Any:
    """Like ``choice`` but an unknown string becomes ``default`` instead of an error."""
    allowed = tuple(values)

    def _coerce(value: Any) -> Any:
        if isinstance(value, str) and value not in allowed:
            return default
        return value

    return Annotated[Literal[allowed], BeforeValidator(_coerce)]


def truncated_list(item_type: Any, *, max_items: int, min_items: Optional[int] = None) -> Any:
    """List type that rejects fewer than ``min_items`` items and drops those past ``max_items``."""

    def _truncate(value: Any) -> Any:
        return value[:max_items] if isinstance(value, list) else value

    return Annotated[
        List[item_type],
        BeforeValidator(_truncate),
        Field(min_length=min_items, json_schema_extra={"maxItems": max_items}),
    ]


class AbilityInput(BaseModel):
    """Base class of every ability input model."""

    model_config = ConfigDict(strict=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_none(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    def to_args(self) -> Dict[str, Any]:
        """Validated arguments for the ability body. Absent optional fields are left out."""
        return {name: value for name, value in self if value is not None}


class AbilityOutput(BaseSchema):
    """Base class of every ability output model.

    Field defaults are the zero values protocol failures are padded with.
    """

    success: bool = False
    message: str = ""

    @classmethod
    def zero(cls) -> Dict[str, Any]:
        """Zero value of every declared field except ``success`` and ``message``."""
        return cls().model_dump(exclude={"success", "message"})


class PagedOutput(AbilityOutput):
    total: int = 0
    total_pages: int = 0


class PostIdOutput(AbilityOutput):
    post_id: int = 0
