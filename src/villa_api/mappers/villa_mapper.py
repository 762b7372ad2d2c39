"""
DTO <-> entity translation for villas.

Both directions are pure and copy field for field; nothing is defaulted beyond what the
source object already carries. Timestamps never cross to the wire.
"""
from villa_api.models.villa import Villa
from villa_api.schemas.villa import VillaDTO, VillaCreateDTO, VillaUpdateDTO


class VillaMapper:

    @staticmethod
    def to_dto(entity: Villa) -> VillaDTO:
        return VillaDTO.model_validate(entity)

    @staticmethod
    def to_entity(dto: VillaCreateDTO | VillaUpdateDTO | VillaDTO) -> Villa:
        return Villa(**dto.model_dump())
