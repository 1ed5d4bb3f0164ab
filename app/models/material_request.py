import enum
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db import Base


class MaterialRequestStatus(enum.Enum):
    pending = "PENDING"
    approved = "APPROVED"
    rejected = "REJECTED"


class MaterialRequestType(enum.Enum):
    global_ = "GLOBAL"
    project = "PROJECT"
    project_material = "PROJECT_MATERIAL"


class MaterialRequest(Base):
    __tablename__ = "material_requests"
    __table_args__ = (
        CheckConstraint(
            "type = 'GLOBAL' OR (project_id IS NOT NULL AND quantity IS NOT NULL)",
            name="ck_material_request_allocation_fields",
        ),
        CheckConstraint(
            "type != 'PROJECT_MATERIAL' OR material_id IS NOT NULL",
            name="ck_material_request_existing_material",
        ),
        Index("ix_material_requests_employee_id", "employee_id"),
        Index("ix_material_requests_status", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    request_code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    employee_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)

    # Snapshot of the material as requested
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(120), nullable=False)
    unit: Mapped[str] = mapped_column(String(40), nullable=False)
    default_rate: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    vendor: Mapped[str | None] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text)

    type: Mapped[MaterialRequestType] = mapped_column(
        Enum(MaterialRequestType, values_callable=lambda e: [m.value for m in e], name="material_request_type"),
        nullable=False,
    )
    project_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("projects.id"))
    material_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("materials.id"))
    quantity: Mapped[Decimal | None] = mapped_column(Numeric(12, 3))

    status: Mapped[MaterialRequestStatus] = mapped_column(
        Enum(MaterialRequestStatus, values_callable=lambda e: [m.value for m in e], name="material_request_status"),
        default=MaterialRequestStatus.pending,
        nullable=False,
    )
    request_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC))
    reviewed_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"))
    review_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    approval_notes: Mapped[str | None] = mapped_column(Text)
    rejection_reason: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    employee = relationship("User", foreign_keys=[employee_id])
    reviewer = relationship("User", foreign_keys=[reviewed_by])
    project = relationship("Project", foreign_keys=[project_id])
    material = relationship("Material", foreign_keys=[material_id])
