from .villa import VillaDTO, VillaCreateDTO, VillaUpdateDTO
from .api_response import APIResponse

__all__ = [
    "VillaDTO",
    "VillaCreateDTO",
    "VillaUpdateDTO",
    "APIResponse",
]
