from __future__ import annotations

from decimal import Decimal

from sqlalchemy import case, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.config import settings
from app.db import unit_of_work
from app.errors import ConflictError, NotFoundError
from app.logging import get_logger
from app.models.inventory import Material, MaterialUsage, ProjectMaterial, ProjectMaterialStatus
from app.models.material_request import MaterialRequest
from app.schemas.inventory import (
    MaterialCreate,
    MaterialUpdate,
    ProjectMaterialCreate,
    ProjectMaterialUpdate,
)
from app.services.common import apply_ordering, apply_pagination, coerce_int, get_company_scoped_or_404
from app.services.numbering import generate_material_code
from app.services.projects import ensure_project
from app.services.response import ListResponseMixin

logger = get_logger(__name__)

ZERO = Decimal("0")


def derive_status(assigned: Decimal, used: Decimal) -> ProjectMaterialStatus:
    """Status of an allocation, computed from its quantities and never stored by hand."""
    if used == 0:
        return ProjectMaterialStatus.not_used
    if used >= assigned:
        return ProjectMaterialStatus.completed
    return ProjectMaterialStatus.active


def ensure_material(db: Session, material_id, company_id: int) -> Material:
    return get_company_scoped_or_404(db, Material, material_id, company_id, detail="Material not found")


def find_allocation(db: Session, project_id: int, material_id: int, lock: bool = False) -> ProjectMaterial | None:
    query = (
        db.query(ProjectMaterial)
        .filter(ProjectMaterial.project_id == project_id)
        .filter(ProjectMaterial.material_id == material_id)
    )
    if lock:
        query = query.with_for_update().populate_existing()
    return query.first()


def create_allocation(db: Session, project_id: int, material_id: int, assigned: Decimal) -> ProjectMaterial:
    if find_allocation(db, project_id, material_id):
        raise ConflictError("Material already assigned to this project")
    allocation = ProjectMaterial(
        project_id=project_id,
        material_id=material_id,
        assigned=assigned,
        used=ZERO,
        status=derive_status(assigned, ZERO),
    )
    db.add(allocation)
    db.flush()
    return allocation


def apply_usage_delta(db: Session, allocation: ProjectMaterial, delta: Decimal, floor_at_zero: bool = False) -> None:
    """Move ``used`` by ``delta`` inside the caller's transaction and recompute status.

    The new value is computed by the database (``used = used + delta``) on a
    row the caller has locked, so concurrent writers cannot lose an update.
    """
    expr = ProjectMaterial.used + delta
    if floor_at_zero:
        if allocation.used + delta < 0:
            logger.warning(
                "usage_floor_applied project_material_id=%s used=%s delta=%s",
                allocation.id,
                allocation.used,
                delta,
            )
        expr = case((expr < 0, ZERO), else_=expr)
    allocation.used = expr
    db.flush()
    db.refresh(allocation)
    allocation.status = derive_status(allocation.assigned, allocation.used)
    db.flush()


class Materials(ListResponseMixin):
    @staticmethod
    def create(db: Session, company_id: int, payload: MaterialCreate) -> Material:
        attempts = max(settings.code_allocation_attempts, 1)
        for attempt in range(1, attempts + 1):
            try:
                with unit_of_work(db):
                    material = Material(
                        **payload.model_dump(),
                        material_code=generate_material_code(db),
                        company_id=company_id,
                    )
                    db.add(material)
                    db.flush()
                break
            except IntegrityError:
                if attempt == attempts:
                    raise ConflictError("Could not allocate a material code, please retry")
                logger.info("material_code_collision attempt=%s", attempt)
        db.refresh(material)
        return material

    @staticmethod
    def get(db: Session, company_id: int, material_id) -> Material:
        return ensure_material(db, material_id, company_id)

    @staticmethod
    def list(
        db: Session,
        company_id: int,
        category: str | None,
        search: str | None,
        order_by: str,
        order_dir: str,
        limit: int,
        offset: int,
    ) -> list[Material]:
        query = db.query(Material).filter(Material.company_id == company_id)
        if category and category != "All":
            query = query.filter(Material.category == category)
        if search:
            normalized = search.strip()
            if normalized:
                pattern = f"%{normalized}%"
                query = query.filter(
                    or_(
                        Material.name.ilike(pattern),
                        Material.vendor.ilike(pattern),
                        Material.material_code.ilike(pattern),
                    )
                )
        query = apply_ordering(
            query,
            order_by,
            order_dir,
            {
                "created_at": Material.created_at,
                "name": Material.name,
                "material_code": Material.material_code,
                "category": Material.category,
            },
        )
        return apply_pagination(query, limit, offset).all()

    @staticmethod
    def categories(db: Session, company_id: int) -> list[str]:
        rows = (
            db.query(Material.category)
            .filter(Material.company_id == company_id)
            .distinct()
            .order_by(Material.category.asc())
            .all()
        )
        return ["All", *[row[0] for row in rows]]

    @staticmethod
    def update(db: Session, company_id: int, material_id, payload: MaterialUpdate) -> Material:
        material = ensure_material(db, material_id, company_id)
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(material, field, value)
        db.commit()
        db.refresh(material)
        return material

    @staticmethod
    def delete(db: Session, company_id: int, material_id) -> None:
        material = ensure_material(db, material_id, company_id)
        material_pk = material.id
        if db.query(ProjectMaterial.id).filter(ProjectMaterial.material_id == material.id).first():
            raise ConflictError("Cannot delete material that is assigned to projects")
        if db.query(MaterialUsage.id).filter(MaterialUsage.material_id == material.id).first():
            raise ConflictError("Cannot delete material that has usage records")
        if db.query(MaterialRequest.id).filter(MaterialRequest.material_id == material.id).first():
            raise ConflictError("Cannot delete material that is referenced by material requests")
        try:
            with unit_of_work(db):
                db.delete(material)
        except IntegrityError as exc:
            raise ConflictError("Material is still referenced and cannot be deleted") from exc
        logger.info("material_deleted id=%s company_id=%s", material_pk, company_id)


class ProjectMaterials(ListResponseMixin):
    @staticmethod
    def get(db: Session, company_id: int, project_material_id) -> ProjectMaterial:
        allocation = db.get(
            ProjectMaterial,
            coerce_int(project_material_id),
            options=[selectinload(ProjectMaterial.project), selectinload(ProjectMaterial.material)],
        )
        if not allocation or allocation.project.company_id != company_id:
            raise NotFoundError("Project material not found")
        return allocation

    @staticmethod
    def list(db: Session, company_id: int, project_id, limit: int, offset: int) -> list[ProjectMaterial]:
        project = ensure_project(db, project_id, company_id)
        query = (
            db.query(ProjectMaterial)
            .options(selectinload(ProjectMaterial.material))
            .filter(ProjectMaterial.project_id == project.id)
            .order_by(ProjectMaterial.created_at.asc(), ProjectMaterial.id.asc())
        )
        return apply_pagination(query, limit, offset).all()

    @staticmethod
    def create(db: Session, company_id: int, payload: ProjectMaterialCreate) -> ProjectMaterial:
        project = ensure_project(db, payload.project_id, company_id)
        material = ensure_material(db, payload.material_id, company_id)
        try:
            with unit_of_work(db):
                allocation = create_allocation(db, project.id, material.id, payload.assigned)
        except IntegrityError as exc:
            raise ConflictError("Material already assigned to this project") from exc
        db.refresh(allocation)
        logger.info(
            "project_material_created id=%s project_id=%s material_id=%s assigned=%s",
            allocation.id,
            project.id,
            material.id,
            allocation.assigned,
        )
        return allocation

    @staticmethod
    def update(db: Session, company_id: int, project_material_id, payload: ProjectMaterialUpdate) -> ProjectMaterial:
        allocation = ProjectMaterials.get(db, company_id, project_material_id)
        with unit_of_work(db):
            locked = find_allocation(db, allocation.project_id, allocation.material_id, lock=True)
            if locked is None:
                raise NotFoundError("Project material not found")
            locked.assigned = payload.assigned
            locked.status = derive_status(locked.assigned, locked.used)
        db.refresh(allocation)
        return allocation

    @staticmethod
    def delete(db: Session, company_id: int, project_material_id) -> None:
        allocation = ProjectMaterials.get(db, company_id, project_material_id)
        with unit_of_work(db):
            locked = find_allocation(db, allocation.project_id, allocation.material_id, lock=True)
            if locked is None:
                raise NotFoundError("Project material not found")
            if locked.used > 0:
                raise ConflictError("Cannot remove material that has usage records")
            db.delete(locked)


materials = Materials()
project_materials = ProjectMaterials()
