from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python; ORM rows validate directly."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def strip_required(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    if not v:
        raise ValueError("must not be blank")
    return v


def strip_optional(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    return v.strip() or None


class NamedRef(CamelModel):
    id: str
    name: str
