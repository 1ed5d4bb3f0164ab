from datetime import UTC, date, datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db import Base


class Labour(Base):
    __tablename__ = "labours"
    __table_args__ = (Index("ix_labours_company_id", "company_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(160), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    address: Mapped[str | None] = mapped_column(Text)
    company_id: Mapped[int] = mapped_column(Integer, ForeignKey("companies.id"), nullable=False)
    project_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("projects.id"))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    project = relationship("Project")
    payments = relationship(
        "LabourPayment",
        back_populates="labour",
        cascade="all, delete-orphan",
        order_by="LabourPayment.paid_on.desc()",
    )

    @property
    def total_paid(self) -> Decimal:
        return sum((payment.amount for payment in self.payments), Decimal("0"))


class LabourPayment(Base):
    __tablename__ = "labour_payments"
    __table_args__ = (CheckConstraint("amount > 0", name="ck_labour_payments_amount_positive"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    labour_id: Mapped[int] = mapped_column(Integer, ForeignKey("labours.id"), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    paid_on: Mapped[date] = mapped_column(Date, nullable=False, default=lambda: datetime.now(UTC).date())
    remarks: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC))

    labour = relationship("Labour", back_populates="payments")
