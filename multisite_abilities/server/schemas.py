"""
API Schemas.

This module contains Pydantic models used for API request bodies and response validation.
These schemas define the interface contract between the client and the server.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AbilityRead(BaseModel):
    """Public description of one registered ability."""

    name: str = Field(..., description="Fully qualified ability name.", examples=["vip-multisite/list-sites"])
    label: str
    description: str
    category: str
    input_schema: Dict[str, Any] = Field(default_factory=dict)
    output_schema: Dict[str, Any] = Field(default_factory=dict)
    tenant_scoped: bool = Field(
        ..., description="Whether the ability runs inside the tenant context of its site_id input."
    )


class AbilityCategoryRead(BaseModel):
    """A category together with the names of the abilities listed under it."""

    slug: str
    label: str
    description: str = ""
    abilities: List[str] = Field(default_factory=list)


class AbilityRunRequest(BaseModel):
    """
    Schema for running an ability.

    ``input`` is passed to the ability unchanged; its validation against the
    ability's input schema happens in the executor.
    """

    input: Optional[Any] = Field(
        default=None,
        description="Input object for the ability. Omit for abilities without required input.",
        examples=[{"site_id": 2, "option_names": ["blogname"]}],
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "input": {"site_id": 2, "options": {"blogname": "Newsroom", "show_on_front": "page"}},
            }
        }
    )
