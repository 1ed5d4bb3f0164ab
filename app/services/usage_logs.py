"""Usage logs and the allocation counters they keep in step.

Every create, update and delete of a MaterialUsage row moves the matching
ProjectMaterial.used by the same amount inside one transaction.
"""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy.orm import Session, selectinload

from app.db import unit_of_work
from app.errors import AuthorizationError, NotFoundError, ValidationError
from app.logging import get_logger
from app.models.inventory import MaterialUsage, ProjectMaterial
from app.models.user import UserRole
from app.schemas.inventory import MaterialUsageCreate, MaterialUsageUpdate
from app.services.common import apply_pagination, coerce_int
from app.services.inventory import apply_usage_delta, find_allocation
from app.services.projects import ensure_project
from app.services.response import ListResponseMixin

logger = get_logger(__name__)


def _plain(value: Decimal) -> str:
    return format(value.normalize(), "f")


def over_allocation_warning(allocation: ProjectMaterial) -> str | None:
    if allocation.used > allocation.assigned:
        return (
            "Usage exceeds assigned quantity. "
            f"Assigned: {_plain(allocation.assigned)}, Used: {_plain(allocation.used)}"
        )
    return None


def _locked_allocation(db: Session, project_id: int, material_id: int) -> ProjectMaterial:
    allocation = find_allocation(db, project_id, material_id, lock=True)
    if not allocation:
        raise ValidationError("Material is not assigned to this project")
    return allocation


def _get_scoped(db: Session, usage_id, company_id: int) -> MaterialUsage:
    usage = db.get(MaterialUsage, coerce_int(usage_id), options=[selectinload(MaterialUsage.project)])
    if not usage or usage.project.company_id != company_id:
        raise NotFoundError("Usage log not found")
    return usage


def _lock_usage(db: Session, usage_id: int) -> MaterialUsage:
    # Re-read under lock; quantity deltas must come from the committed row.
    usage = (
        db.query(MaterialUsage)
        .filter(MaterialUsage.id == usage_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if not usage:
        raise NotFoundError("Usage log not found")
    return usage


class UsageLogs(ListResponseMixin):
    @staticmethod
    def list(db: Session, company_id: int, project_id, limit: int, offset: int) -> list[MaterialUsage]:
        if project_id is None:
            raise ValidationError("Project ID is required")
        project = ensure_project(db, project_id, company_id)
        query = (
            db.query(MaterialUsage)
            .filter(MaterialUsage.project_id == project.id)
            .order_by(MaterialUsage.usage_date.desc(), MaterialUsage.id.desc())
        )
        return apply_pagination(query, limit, offset).all()

    @staticmethod
    def create(db: Session, user_id: int, company_id: int, payload: MaterialUsageCreate) -> dict:
        project = ensure_project(db, payload.project_id, company_id)
        with unit_of_work(db):
            allocation = _locked_allocation(db, project.id, payload.material_id)
            usage = MaterialUsage(
                project_id=project.id,
                material_id=payload.material_id,
                user_id=user_id,
                quantity=payload.quantity,
                usage_date=payload.usage_date or datetime.now(UTC).date(),
                remarks=payload.remarks,
            )
            db.add(usage)
            db.flush()
            apply_usage_delta(db, allocation, payload.quantity)
            warning = over_allocation_warning(allocation)
        db.refresh(usage)
        db.refresh(allocation)
        if warning:
            logger.warning(
                "usage_exceeds_assignment project_material_id=%s assigned=%s used=%s",
                allocation.id,
                allocation.assigned,
                allocation.used,
            )
        logger.info(
            "usage_logged id=%s project_id=%s material_id=%s quantity=%s",
            usage.id,
            usage.project_id,
            usage.material_id,
            usage.quantity,
        )
        return {"usage_log": usage, "project_material": allocation, "warning": warning}

    @staticmethod
    def update(
        db: Session,
        usage_id,
        user_id: int,
        company_id: int,
        role: str,
        payload: MaterialUsageUpdate,
    ) -> dict:
        usage = _get_scoped(db, usage_id, company_id)
        if role != UserRole.admin.value and usage.user_id != user_id:
            raise AuthorizationError("Only an admin or the author can edit this usage log")
        data = payload.model_dump(exclude_unset=True)
        allocation = None
        with unit_of_work(db):
            usage = _lock_usage(db, usage.id)
            old_quantity: Decimal = usage.quantity
            new_quantity: Decimal = data.get("quantity") or old_quantity
            diff = new_quantity - old_quantity
            if diff != 0:
                allocation = _locked_allocation(db, usage.project_id, usage.material_id)
                apply_usage_delta(db, allocation, diff)
            usage.quantity = new_quantity
            if "remarks" in data:
                usage.remarks = data["remarks"]
            if data.get("usage_date") is not None:
                usage.usage_date = data["usage_date"]
        db.refresh(usage)
        if allocation is None:
            allocation = find_allocation(db, usage.project_id, usage.material_id)
        else:
            db.refresh(allocation)
        return {
            "usage_log": usage,
            "project_material": allocation,
            "warning": over_allocation_warning(allocation) if allocation else None,
        }

    @staticmethod
    def delete(db: Session, usage_id, company_id: int) -> None:
        usage = _get_scoped(db, usage_id, company_id)
        with unit_of_work(db):
            usage = _lock_usage(db, usage.id)
            quantity = usage.quantity
            allocation = find_allocation(db, usage.project_id, usage.material_id, lock=True)
            if allocation is not None:
                apply_usage_delta(db, allocation, -quantity, floor_at_zero=True)
            db.delete(usage)
        logger.info("usage_deleted id=%s quantity=%s", usage_id, quantity)


usage_logs = UsageLogs()
