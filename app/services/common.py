from enum import Enum

from sqlalchemy.orm import Session

from app.errors import NotFoundError, ValidationError


def coerce_int(value, label: str = "id") -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid {label}") from exc


def validate_enum(value, enum_cls: type[Enum], label: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {label}. Allowed: {allowed}") from exc


def apply_ordering(query, order_by: str, order_dir: str, allowed_columns: dict):
    if order_by not in allowed_columns:
        allowed = ", ".join(sorted(allowed_columns))
        raise ValidationError(f"Invalid order_by. Allowed: {allowed}")
    column = allowed_columns[order_by]
    if order_dir == "asc":
        return query.order_by(column.asc())
    return query.order_by(column.desc())


def apply_pagination(query, limit: int, offset: int):
    return query.limit(limit).offset(offset)


def get_or_404(db: Session, model, obj_id, detail: str | None = None, options=None):
    obj = db.get(model, coerce_int(obj_id), options=options)
    if not obj:
        raise NotFoundError(detail or f"{model.__name__} not found")
    return obj


def get_company_scoped_or_404(db: Session, model, obj_id, company_id: int, detail: str | None = None):
    """Fetch a row that carries ``company_id`` directly.

    Rows owned by another tenant are reported as missing.
    """
    obj = db.get(model, coerce_int(obj_id))
    if not obj or obj.company_id != company_id:
        raise NotFoundError(detail or f"{model.__name__} not found")
    return obj
