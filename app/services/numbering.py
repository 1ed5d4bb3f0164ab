"""Human-readable codes for materials ("MAT001") and requests ("REQ001").

A code is the prefix plus the next integer after the highest numeric suffix
already stored, zero-padded to three digits. Suffixes past 999 simply widen.
Gaps are allowed and codes are never reused; two writers racing for the same
code are stopped by the unique constraint and retried by the caller.
"""

from sqlalchemy.orm import Session

from app.models.inventory import Material
from app.models.material_request import MaterialRequest

MATERIAL_CODE_PREFIX = "MAT"
REQUEST_CODE_PREFIX = "REQ"
CODE_PADDING = 3


def _format_number(prefix: str | None, padding: int | None, value: int) -> str:
    prefix_value = prefix or ""
    pad = max(int(padding or 0), 0)
    if pad > 0:
        return f"{prefix_value}{value:0{pad}d}"
    return f"{prefix_value}{value}"


def _parse_suffix(code: str | None, prefix: str) -> int | None:
    if not code or not code.startswith(prefix):
        return None
    suffix = code[len(prefix):]
    if not suffix.isdigit():
        return None
    return int(suffix)


def next_code(db: Session, column, prefix: str, padding: int = CODE_PADDING) -> str:
    # Scanned in Python: "MAT1000" sorts before "MAT999" as a string.
    codes = db.query(column).filter(column.startswith(prefix)).all()
    highest = 0
    for (code,) in codes:
        value = _parse_suffix(code, prefix)
        if value is not None and value > highest:
            highest = value
    return _format_number(prefix, padding, highest + 1)


def generate_material_code(db: Session) -> str:
    return next_code(db, Material.material_code, MATERIAL_CODE_PREFIX)


def generate_request_code(db: Session) -> str:
    return next_code(db, MaterialRequest.request_code, REQUEST_CODE_PREFIX)
