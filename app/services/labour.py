from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app.errors import NotFoundError
from app.logging import get_logger
from app.models.labour import Labour, LabourPayment
from app.models.projects import Project
from app.schemas.labour import LabourCreate, LabourPaymentCreate, LabourUpdate
from app.services.common import apply_pagination, coerce_int, get_company_scoped_or_404
from app.services.projects import ensure_project
from app.services.response import ListResponseMixin

logger = get_logger(__name__)

ZERO = Decimal("0")


def _get(db: Session, company_id: int, labour_id) -> Labour:
    return get_company_scoped_or_404(db, Labour, labour_id, company_id, detail="Labour not found")


def _month_start(now: datetime | None = None):
    now = now or datetime.now(UTC)
    return now.date().replace(day=1)


class Labours(ListResponseMixin):
    @staticmethod
    def create(db: Session, company_id: int, payload: LabourCreate) -> Labour:
        if payload.project_id is not None:
            ensure_project(db, payload.project_id, company_id)
        labour = Labour(**payload.model_dump(), company_id=company_id)
        db.add(labour)
        db.commit()
        db.refresh(labour)
        return labour

    @staticmethod
    def get(db: Session, company_id: int, labour_id) -> Labour:
        return _get(db, company_id, labour_id)

    @staticmethod
    def list(db: Session, company_id: int, project_id, limit: int, offset: int) -> list[Labour]:
        query = (
            db.query(Labour)
            .options(selectinload(Labour.payments))
            .filter(Labour.company_id == company_id)
        )
        if project_id is not None:
            project = ensure_project(db, project_id, company_id)
            query = query.filter(Labour.project_id == project.id)
        query = query.order_by(Labour.created_at.desc(), Labour.id.desc())
        return apply_pagination(query, limit, offset).all()

    @staticmethod
    def update(db: Session, company_id: int, labour_id, payload: LabourUpdate) -> Labour:
        labour = _get(db, company_id, labour_id)
        data = payload.model_dump(exclude_unset=True)
        if data.get("project_id") is not None:
            ensure_project(db, data["project_id"], company_id)
        for field, value in data.items():
            setattr(labour, field, value)
        db.commit()
        db.refresh(labour)
        return labour

    @staticmethod
    def delete(db: Session, company_id: int, labour_id) -> None:
        labour = _get(db, company_id, labour_id)
        db.delete(labour)
        db.commit()

    @staticmethod
    def add_payment(db: Session, company_id: int, labour_id, payload: LabourPaymentCreate) -> LabourPayment:
        labour = _get(db, company_id, labour_id)
        payment = LabourPayment(
            labour_id=labour.id,
            amount=payload.amount,
            paid_on=payload.paid_on or datetime.now(UTC).date(),
            remarks=payload.remarks,
        )
        db.add(payment)
        db.commit()
        db.refresh(payment)
        logger.info("labour_payment_recorded labour_id=%s amount=%s", labour.id, payment.amount)
        return payment

    @staticmethod
    def list_payments(db: Session, company_id: int, labour_id) -> list[LabourPayment]:
        labour = _get(db, company_id, labour_id)
        return list(labour.payments)

    @staticmethod
    def delete_payment(db: Session, company_id: int, labour_id, payment_id) -> None:
        labour = _get(db, company_id, labour_id)
        payment = db.get(LabourPayment, coerce_int(payment_id))
        if not payment or payment.labour_id != labour.id:
            raise NotFoundError("Payment not found")
        db.delete(payment)
        db.commit()

    @staticmethod
    def statistics(db: Session, company_id: int) -> dict:
        total_labourers = db.query(func.count(Labour.id)).filter(Labour.company_id == company_id).scalar() or 0
        payments = (
            db.query(LabourPayment)
            .join(Labour, LabourPayment.labour_id == Labour.id)
            .filter(Labour.company_id == company_id)
            .all()
        )
        month_start = _month_start()
        this_month = [payment for payment in payments if payment.paid_on >= month_start]
        total_paid = sum((payment.amount for payment in payments), ZERO)
        by_project = (
            db.query(Labour.project_id, Project.name, func.count(Labour.id))
            .outerjoin(Project, Labour.project_id == Project.id)
            .filter(Labour.company_id == company_id)
            .group_by(Labour.project_id, Project.name)
            .order_by(Project.name.asc())
            .all()
        )
        average = (total_paid / total_labourers).quantize(Decimal("0.01")) if total_labourers else ZERO
        return {
            "total_labourers": total_labourers,
            "total_paid": total_paid,
            "total_paid_this_month": sum((payment.amount for payment in this_month), ZERO),
            "total_payments": len(payments),
            "payments_this_month": len(this_month),
            "labourers_by_project": [
                {"project_id": project_id, "project_name": name, "count": count}
                for project_id, name, count in by_project
            ],
            "average_payment_per_labourer": average,
        }


labours = Labours()
