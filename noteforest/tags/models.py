"""Pydantic models for tags."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Tag(BaseModel):
    """A named label attached to notes.

    Tags are identified by name. The numeric id is a process-local
    surrogate handed out by the tag registry; it is ``None`` when the
    registry has never seen the name.

    Attributes:
        id: Registry id, unique per distinct name within one process
        name: Tag name
        created_at: RFC 3339 timestamp the tag was stamped with
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int | None = Field(default=None, ge=1, description="Registry-assigned tag id")
    name: str = Field(..., description="Tag name")
    created_at: str = Field(..., description="RFC 3339 timestamp")
