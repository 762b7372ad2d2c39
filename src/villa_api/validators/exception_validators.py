from sqlalchemy import inspect as sa_inspect


def get_column_names(model) -> list[str]:
    """
    Names of the mapped column attributes of `model` (class or instance), in table order.
    """
    mapper = sa_inspect(model) if isinstance(model, type) else sa_inspect(type(model))
    return [attr.key for attr in mapper.column_attrs]


def find_unknown_fields(model, names) -> list[str]:
    """
    Return the names that are not mapped column attributes of the model.
    - model: the SQLAlchemy model class (not instance)
    - names: iterable of attribute names to validate
    """
    allowed = set(get_column_names(model))
    return [n for n in names if n not in allowed]


def get_required_columns(model) -> list[str]:
    """
    Columns that are NOT NULL and have no server/default and are not simple auto PKs.
    """
    cols = []
    for col in model.__table__.columns:
        has_default = col.default is not None or col.server_default is not None
        is_auto_pk = col.primary_key and col.autoincrement in (True, "auto")
        if not col.nullable and not has_default and not is_auto_pk:
            cols.append(col.name)
    return cols


def find_missing_required(entity) -> list[str]:
    """
    Required columns (see `get_required_columns`) whose value on `entity` is None.
    """
    return [c for c in get_required_columns(type(entity)) if getattr(entity, c, None) is None]
