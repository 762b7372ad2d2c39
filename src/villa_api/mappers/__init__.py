from .villa_mapper import VillaMapper

__all__ = ["VillaMapper"]
