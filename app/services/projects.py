from __future__ import annotations

from pathlib import PurePosixPath

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.db import unit_of_work
from app.errors import ConflictError, NotFoundError, ValidationError
from app.logging import get_logger
from app.models.contract import Contract
from app.models.inventory import MaterialUsage, ProjectMaterial
from app.models.labour import Labour
from app.models.material_request import MaterialRequest
from app.models.projects import Project, ProjectAssignment, ProjectFile, ProjectStatus
from app.models.user import User
from app.schemas.projects import ProjectCreate, ProjectUpdate
from app.services.common import (
    apply_ordering,
    apply_pagination,
    coerce_int,
    get_company_scoped_or_404,
    validate_enum,
)
from app.services.response import ListResponseMixin
from app.services.storage import discard, project_file_policy, store_upload

logger = get_logger(__name__)


def ensure_project(db: Session, project_id, company_id: int) -> Project:
    return get_company_scoped_or_404(db, Project, project_id, company_id, detail="Project not found")


def _ensure_company_user(db: Session, user_id, company_id: int) -> User:
    return get_company_scoped_or_404(db, User, user_id, company_id, detail="Assigned user not found")


def _validate_dates(start_date, end_date) -> None:
    if start_date and end_date and end_date < start_date:
        raise ValidationError("End date must be after start date")


def _ensure_code_available(db: Session, company_id: int, project_code: str, exclude_id: int | None = None) -> None:
    query = db.query(Project.id).filter(Project.company_id == company_id).filter(Project.project_code == project_code)
    if exclude_id is not None:
        query = query.filter(Project.id != exclude_id)
    if query.first():
        raise ConflictError("Project ID already exists")


class Projects(ListResponseMixin):
    @staticmethod
    def create(db: Session, company_id: int, payload: ProjectCreate) -> Project:
        _validate_dates(payload.start_date, payload.end_date)
        project_code = payload.project_code.strip()
        _ensure_code_available(db, company_id, project_code)
        assignee = None
        if payload.assigned_user_id is not None:
            assignee = _ensure_company_user(db, payload.assigned_user_id, company_id)
        data = payload.model_dump(exclude={"assigned_user_id"})
        data["project_code"] = project_code
        try:
            with unit_of_work(db):
                project = Project(**data, company_id=company_id)
                db.add(project)
                db.flush()
                if assignee:
                    db.add(ProjectAssignment(project_id=project.id, user_id=assignee.id))
        except IntegrityError as exc:
            raise ConflictError("Project ID already exists") from exc
        db.refresh(project)
        logger.info("project_created id=%s code=%s company_id=%s", project.id, project.project_code, company_id)
        return project

    @staticmethod
    def get(db: Session, company_id: int, project_id) -> Project:
        return ensure_project(db, project_id, company_id)

    @staticmethod
    def list(
        db: Session,
        company_id: int,
        status: str | None,
        project_type: str | None,
        search: str | None,
        order_by: str,
        order_dir: str,
        limit: int,
        offset: int,
    ) -> list[Project]:
        query = (
            db.query(Project)
            .options(selectinload(Project.assignments))
            .filter(Project.company_id == company_id)
        )
        if status:
            query = query.filter(Project.status == validate_enum(status, ProjectStatus, "status"))
        if project_type:
            query = query.filter(Project.project_type == project_type)
        if search:
            normalized = search.strip()
            if normalized:
                pattern = f"%{normalized}%"
                query = query.filter(
                    or_(
                        Project.name.ilike(pattern),
                        Project.client_name.ilike(pattern),
                        Project.project_code.ilike(pattern),
                    )
                )
        query = apply_ordering(
            query,
            order_by,
            order_dir,
            {
                "created_at": Project.created_at,
                "name": Project.name,
                "due_date": Project.due_date,
                "project_code": Project.project_code,
            },
        )
        return apply_pagination(query, limit, offset).all()

    @staticmethod
    def update(db: Session, company_id: int, project_id, payload: ProjectUpdate) -> Project:
        project = ensure_project(db, project_id, company_id)
        data = payload.model_dump(exclude_unset=True)
        assigned_user_id = data.pop("assigned_user_id", None)
        _validate_dates(data.get("start_date", project.start_date), data.get("end_date", project.end_date))
        if "project_code" in data:
            data["project_code"] = data["project_code"].strip()
            _ensure_code_available(db, company_id, data["project_code"], exclude_id=project.id)
        assignee = None
        if assigned_user_id is not None:
            assignee = _ensure_company_user(db, assigned_user_id, company_id)
        with unit_of_work(db):
            for field, value in data.items():
                setattr(project, field, value)
            if assignee:
                project.assignments.clear()
                db.flush()
                project.assignments.append(ProjectAssignment(user_id=assignee.id))
        db.refresh(project)
        return project

    @staticmethod
    def delete(db: Session, company_id: int, project_id) -> None:
        project = ensure_project(db, project_id, company_id)
        storage_keys = [row.storage_key for row in project.files]
        with unit_of_work(db):
            db.query(MaterialUsage).filter(MaterialUsage.project_id == project.id).delete(synchronize_session=False)
            db.query(ProjectMaterial).filter(ProjectMaterial.project_id == project.id).delete(
                synchronize_session=False
            )
            db.query(MaterialRequest).filter(MaterialRequest.project_id == project.id).delete(
                synchronize_session=False
            )
            db.query(Contract).filter(Contract.project_id == project.id).delete(synchronize_session=False)
            db.query(Labour).filter(Labour.project_id == project.id).update(
                {Labour.project_id: None}, synchronize_session=False
            )
            db.delete(project)
        for key in storage_keys:
            discard(key)
        logger.info("project_deleted id=%s company_id=%s files=%s", project_id, company_id, len(storage_keys))


class ProjectFiles:
    @staticmethod
    def list(db: Session, company_id: int, project_id) -> list[ProjectFile]:
        project = ensure_project(db, project_id, company_id)
        return (
            db.query(ProjectFile)
            .filter(ProjectFile.project_id == project.id)
            .order_by(ProjectFile.created_at.desc(), ProjectFile.id.desc())
            .all()
        )

    @staticmethod
    def add(
        db: Session,
        company_id: int,
        project_id,
        uploaded_by: int,
        file_name: str,
        content_type: str | None,
        content: bytes,
    ) -> ProjectFile:
        project = ensure_project(db, project_id, company_id)
        url, key = store_upload(project_file_policy(), f"projects/{project.id}", file_name, content, content_type)
        try:
            with unit_of_work(db):
                record = ProjectFile(
                    project_id=project.id,
                    file_name=PurePosixPath(file_name).name,
                    storage_key=key,
                    url=url,
                    content_type=content_type,
                    size_bytes=len(content),
                    uploaded_by=uploaded_by,
                )
                db.add(record)
        except Exception:
            discard(key)
            raise
        db.refresh(record)
        return record

    @staticmethod
    def delete(db: Session, company_id: int, project_id, file_id) -> None:
        project = ensure_project(db, project_id, company_id)
        record = db.get(ProjectFile, coerce_int(file_id))
        if not record or record.project_id != project.id:
            raise NotFoundError("File not found")
        key = record.storage_key
        db.delete(record)
        db.commit()
        discard(key)


projects = Projects()
project_files = ProjectFiles()
