"""Material request approval workflow.

PENDING -> APPROVED | REJECTED, both terminal. Approving a request creates
the catalog material and/or the project allocation it asks for in the same
transaction as the status change and the requester's notification.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.config import settings
from app.db import unit_of_work
from app.errors import AuthorizationError, ConflictError, InternalError, NotFoundError, ValidationError
from app.logging import get_logger
from app.models.inventory import Material
from app.models.material_request import MaterialRequest, MaterialRequestStatus, MaterialRequestType
from app.models.notification import NotificationType
from app.models.user import User, UserRole
from app.schemas.material_request import MaterialRequestCreate
from app.services.common import apply_ordering, apply_pagination, coerce_int, validate_enum
from app.services.inventory import create_allocation, ensure_material
from app.services.notifications import notify
from app.services.numbering import generate_material_code, generate_request_code
from app.services.projects import ensure_project
from app.services.response import ListResponseMixin
from app.telemetry import get_tracer

logger = get_logger(__name__)

# Terminal statuses that cannot transition further
_TERMINAL_STATUSES = {
    MaterialRequestStatus.approved,
    MaterialRequestStatus.rejected,
}

_ALLOCATING_TYPES = {MaterialRequestType.project, MaterialRequestType.project_material}


def _attempts() -> int:
    return max(settings.code_allocation_attempts, 1)


def _validate_submission(db: Session, company_id: int, payload: MaterialRequestCreate) -> dict:
    request_type = validate_enum(payload.type, MaterialRequestType, "request type")
    data = payload.model_dump(exclude={"type", "project_id", "material_id", "quantity"})
    data["type"] = request_type
    if request_type == MaterialRequestType.project:
        if payload.project_id is None or payload.quantity is None:
            raise ValidationError("Project ID and quantity are required for project requests")
    elif request_type == MaterialRequestType.project_material:
        if payload.project_id is None or payload.material_id is None or payload.quantity is None:
            raise ValidationError("Project ID, material ID and quantity are required for project material requests")
    if request_type in _ALLOCATING_TYPES:
        data["project_id"] = ensure_project(db, payload.project_id, company_id).id
        data["quantity"] = payload.quantity
    if request_type == MaterialRequestType.project_material:
        data["material_id"] = ensure_material(db, payload.material_id, company_id).id
    return data


def _lock_for_review(db: Session, request_id: int, reviewer_company_id: int) -> MaterialRequest:
    mr = (
        db.query(MaterialRequest)
        .options(selectinload(MaterialRequest.employee))
        .filter(MaterialRequest.id == request_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if not mr:
        raise NotFoundError("Material request not found")
    if mr.status in _TERMINAL_STATUSES:
        raise ConflictError("Request has already been reviewed")
    if mr.employee.company_id != reviewer_company_id:
        raise AuthorizationError("Not authorized to review this request")
    return mr


def _apply_approval(db: Session, mr: MaterialRequest) -> Material | None:
    if mr.type in (MaterialRequestType.global_, MaterialRequestType.project):
        material = Material(
            material_code=generate_material_code(db),
            name=mr.name,
            category=mr.category,
            unit=mr.unit,
            default_rate=mr.default_rate,
            vendor=mr.vendor,
            description=mr.description,
            company_id=mr.employee.company_id,
        )
        db.add(material)
        db.flush()
        if mr.type == MaterialRequestType.project:
            create_allocation(db, mr.project_id, material.id, mr.quantity)
        return material
    if mr.type == MaterialRequestType.project_material:
        create_allocation(db, mr.project_id, mr.material_id, mr.quantity)
        return None
    raise InternalError(f"Unsupported material request type: {mr.type}")


class MaterialRequests(ListResponseMixin):
    @staticmethod
    def submit(db: Session, employee_id: int, company_id: int, payload: MaterialRequestCreate) -> MaterialRequest:
        data = _validate_submission(db, company_id, payload)
        attempts = _attempts()
        for attempt in range(1, attempts + 1):
            try:
                with unit_of_work(db):
                    mr = MaterialRequest(
                        **data,
                        request_code=generate_request_code(db),
                        employee_id=employee_id,
                        status=MaterialRequestStatus.pending,
                        request_date=datetime.now(UTC),
                    )
                    db.add(mr)
                    db.flush()
                    notify(
                        db,
                        employee_id,
                        f'Material request for "{mr.name}" has been submitted for approval',
                        NotificationType.info,
                    )
                break
            except IntegrityError:
                if attempt == attempts:
                    raise ConflictError("Could not allocate a request code, please retry")
                logger.info("request_code_collision attempt=%s", attempt)
        db.refresh(mr)
        logger.info(
            "material_request_submitted id=%s code=%s type=%s employee_id=%s",
            mr.id,
            mr.request_code,
            mr.type.value,
            employee_id,
        )
        return mr

    @staticmethod
    def approve(
        db: Session,
        request_id,
        reviewer_id: int,
        reviewer_company_id: int,
        approval_notes: str | None = None,
    ) -> MaterialRequest:
        request_pk = coerce_int(request_id, "request id")
        attempts = _attempts()
        tracer = get_tracer(__name__)
        with tracer.start_as_current_span(
            "material_request.approve",
            attributes={"material_request.id": request_pk},
        ) as span:
            for attempt in range(1, attempts + 1):
                try:
                    with unit_of_work(db):
                        mr = _lock_for_review(db, request_pk, reviewer_company_id)
                        mr.status = MaterialRequestStatus.approved
                        mr.reviewed_by = reviewer_id
                        mr.review_date = datetime.now(UTC)
                        mr.approval_notes = approval_notes
                        material = _apply_approval(db, mr)
                        notify(
                            db,
                            mr.employee_id,
                            f'Your request for "{mr.name}" has been approved',
                            NotificationType.success,
                        )
                    break
                except IntegrityError:
                    if attempt == attempts:
                        raise ConflictError("Could not complete the approval, please retry")
                    logger.info("material_request_approve_retry id=%s attempt=%s", request_pk, attempt)
            span.set_attribute("material_request.type", mr.type.value)
        db.refresh(mr)
        logger.info(
            "material_request_approved id=%s type=%s reviewer_id=%s material_id=%s",
            mr.id,
            mr.type.value,
            reviewer_id,
            material.id if material else mr.material_id,
        )
        return mr

    @staticmethod
    def reject(
        db: Session,
        request_id,
        reviewer_id: int,
        reviewer_company_id: int,
        rejection_reason: str | None,
    ) -> MaterialRequest:
        reason = (rejection_reason or "").strip()
        if not reason:
            raise ValidationError("Rejection reason is required")
        request_pk = coerce_int(request_id, "request id")
        with unit_of_work(db):
            mr = _lock_for_review(db, request_pk, reviewer_company_id)
            mr.status = MaterialRequestStatus.rejected
            mr.reviewed_by = reviewer_id
            mr.review_date = datetime.now(UTC)
            mr.rejection_reason = reason
            notify(
                db,
                mr.employee_id,
                f'Your request for "{mr.name}" has been rejected: {reason}',
                NotificationType.error,
            )
        db.refresh(mr)
        logger.info("material_request_rejected id=%s reviewer_id=%s", mr.id, reviewer_id)
        return mr

    @staticmethod
    def get(db: Session, request_id, user_id: int, company_id: int, role: str) -> MaterialRequest:
        mr = db.get(
            MaterialRequest,
            coerce_int(request_id, "request id"),
            options=[selectinload(MaterialRequest.employee)],
        )
        if not mr or mr.employee.company_id != company_id:
            raise NotFoundError("Material request not found")
        if role != UserRole.admin.value and mr.employee_id != user_id:
            raise NotFoundError("Material request not found")
        return mr

    @staticmethod
    def list(
        db: Session,
        company_id: int,
        employee_id: int | None,
        status: str | None,
        request_type: str | None,
        order_by: str,
        order_dir: str,
        limit: int,
        offset: int,
    ) -> list[MaterialRequest]:
        query = (
            db.query(MaterialRequest)
            .join(User, MaterialRequest.employee_id == User.id)
            .filter(User.company_id == company_id)
        )
        if employee_id is not None:
            query = query.filter(MaterialRequest.employee_id == employee_id)
        if status:
            query = query.filter(MaterialRequest.status == validate_enum(status, MaterialRequestStatus, "status"))
        if request_type:
            query = query.filter(
                MaterialRequest.type == validate_enum(request_type, MaterialRequestType, "request type")
            )
        query = apply_ordering(
            query,
            order_by,
            order_dir,
            {
                "request_date": MaterialRequest.request_date,
                "created_at": MaterialRequest.created_at,
                "request_code": MaterialRequest.request_code,
            },
        )
        return apply_pagination(query, limit, offset).all()


material_requests = MaterialRequests()
