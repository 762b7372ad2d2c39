"""Villa DTOs, the shapes exchanged on the wire.

Field names are snake_case in Python and camelCase in JSON (`imageUrl`); both
spellings are accepted on input. Only presence is checked: no length, range or
format rules.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class VillaCreateDTO(_WireModel):
    """Payload of a create request. The id is always assigned by the database."""
    name: str
    details: str | None = None
    rate: float
    sqft: int = 0
    occupancy: int = 0
    image_url: str | None = None
    amenity: str | None = None


class VillaUpdateDTO(VillaCreateDTO):
    """Payload of an update request; `id` must match the id in the path."""
    id: int


class VillaDTO(VillaUpdateDTO):
    """Villa as returned to clients. Timestamps stay internal."""
