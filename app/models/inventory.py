import enum
from datetime import UTC, date, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db import Base


class ProjectMaterialStatus(enum.Enum):
    not_used = "NOT_USED"
    active = "ACTIVE"
    completed = "COMPLETED"


class Material(Base):
    __tablename__ = "materials"
    __table_args__ = (Index("ix_materials_company_id", "company_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    material_code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(120), nullable=False)
    unit: Mapped[str] = mapped_column(String(40), nullable=False)
    default_rate: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    vendor: Mapped[str | None] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text)
    company_id: Mapped[int] = mapped_column(Integer, ForeignKey("companies.id"), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )


class ProjectMaterial(Base):
    """Allocation of one material to one project.

    ``used`` only moves through usage logs; ``status`` is always
    ``derive_status(assigned, used)``.
    """

    __tablename__ = "project_materials"
    __table_args__ = (
        UniqueConstraint("project_id", "material_id", name="uq_project_materials_project_material"),
        CheckConstraint("assigned >= 0", name="ck_project_materials_assigned_non_negative"),
        CheckConstraint("used >= 0", name="ck_project_materials_used_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(Integer, ForeignKey("projects.id"), nullable=False)
    material_id: Mapped[int] = mapped_column(Integer, ForeignKey("materials.id"), nullable=False)
    assigned: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)
    used: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False, default=Decimal("0"))
    status: Mapped[ProjectMaterialStatus] = mapped_column(
        Enum(
            ProjectMaterialStatus,
            values_callable=lambda e: [m.value for m in e],
            name="project_material_status",
        ),
        default=ProjectMaterialStatus.not_used,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    project = relationship("Project")
    material = relationship("Material")

    @property
    def remaining(self) -> Decimal:
        return self.assigned - self.used


class MaterialUsage(Base):
    __tablename__ = "material_usages"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_material_usages_quantity_positive"),
        Index("ix_material_usages_project_material", "project_id", "material_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(Integer, ForeignKey("projects.id"), nullable=False)
    material_id: Mapped[int] = mapped_column(Integer, ForeignKey("materials.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)
    usage_date: Mapped[date] = mapped_column(Date, nullable=False, default=lambda: datetime.now(UTC).date())
    remarks: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    project = relationship("Project")
    material = relationship("Material")
    user = relationship("User")
