"""
Typed filter values accepted by `BaseRepository.get` / `get_all`.

A filter names a mapped column and the value it must equal; it is turned into a
SQLAlchemy `WHERE` clause against the repository's model. Field names are checked
against the model's mapped columns before any SQL is built, so a typo raises
`InvalidFieldError` instead of an AttributeError or an empty result.

    await repo.get(ById(3))
    await repo.get(ByName("Royal Villa"), tracked=False)
    await repo.get_all(FieldEquals("occupancy", 4))
"""
from dataclasses import dataclass
from typing import Any

from sqlalchemy.sql.elements import ColumnElement

from villa_api.exceptions.base import InvalidFieldError
from villa_api.validators.exception_validators import find_unknown_fields


@dataclass(frozen=True)
class FieldEquals:
    """Equality on a single mapped column."""

    field: str
    value: Any

    def to_clause(self, model) -> ColumnElement[bool]:
        unknown = find_unknown_fields(model, [self.field])
        if unknown:
            raise InvalidFieldError(
                f"Unknown field(s) for {model.__name__}: {', '.join(unknown)}",
                fields=unknown,
            )
        return getattr(model, self.field) == self.value


class ById(FieldEquals):
    def __init__(self, id: int):
        super().__init__("id", id)


class ByName(FieldEquals):
    def __init__(self, name: str):
        super().__init__("name", name)


__all__ = ["FieldEquals", "ById", "ByName"]
