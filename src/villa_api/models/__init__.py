"""
Single import point for the ORM models.

Importing this package registers every model on `Base.metadata`, which is what
`init_models()` and the test fixtures rely on before calling `create_all`.

    from villa_api.models import Villa
"""

from .villa import Villa

__all__ = [
    "Villa",
]
