from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_admin
from app.api.uploads import read_upload
from app.errors import ValidationError
from app.schemas.common import ListResponse, MessageResponse
from app.schemas.projects import (
    ProjectCreate,
    ProjectFileRead,
    ProjectFileResult,
    ProjectRead,
    ProjectResult,
    ProjectUpdate,
)
from app.services import projects as projects_service

router = APIRouter()


@router.post(
    "/projects",
    response_model=ProjectResult,
    status_code=status.HTTP_201_CREATED,
    tags=["projects"],
)
def create_project(payload: ProjectCreate, auth=Depends(require_admin), db: Session = Depends(get_db)):
    project = projects_service.projects.create(db, auth["company_id"], payload)
    return {"success": True, "message": "Project created successfully", "project": project}


@router.get("/projects", response_model=ListResponse[ProjectRead], tags=["projects"])
def list_projects(
    status: str | None = None,
    project_type: str | None = None,
    search: str | None = None,
    order_by: str = Query(default="created_at"),
    order_dir: str = Query(default="desc", pattern="^(asc|desc)$"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    auth=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return projects_service.projects.list_response(
        db,
        auth["company_id"],
        status,
        project_type,
        search,
        order_by,
        order_dir,
        limit,
        offset,
    )


@router.get("/projects/{project_id}", response_model=ProjectRead, tags=["projects"])
def get_project(project_id: int, auth=Depends(get_current_user), db: Session = Depends(get_db)):
    return projects_service.projects.get(db, auth["company_id"], project_id)


@router.put("/projects/{project_id}", response_model=ProjectResult, tags=["projects"])
def update_project(
    project_id: int,
    payload: ProjectUpdate,
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    project = projects_service.projects.update(db, auth["company_id"], project_id, payload)
    return {"success": True, "message": "Project updated successfully", "project": project}


@router.delete("/projects/{project_id}", response_model=MessageResponse, tags=["projects"])
def delete_project(project_id: int, auth=Depends(require_admin), db: Session = Depends(get_db)):
    projects_service.projects.delete(db, auth["company_id"], project_id)
    return {"success": True, "message": "Project deleted successfully"}


# ── Files ───────────────────────────────────────────────────────


@router.get("/projects/{project_id}/files", response_model=ProjectFileResult, tags=["projects"])
def list_project_files(project_id: int, auth=Depends(get_current_user), db: Session = Depends(get_db)):
    files = projects_service.project_files.list(db, auth["company_id"], project_id)
    return {"success": True, "message": f"{len(files)} file(s)", "files": files}


@router.post(
    "/projects/{project_id}/files",
    response_model=ProjectFileRead,
    status_code=status.HTTP_201_CREATED,
    tags=["projects"],
)
def upload_project_file(
    project_id: int,
    file: UploadFile = File(...),
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    upload = read_upload(file)
    if upload is None:
        raise ValidationError("No file uploaded")
    file_name, content_type, content = upload
    return projects_service.project_files.add(
        db, auth["company_id"], project_id, auth["user_id"], file_name, content_type, content
    )


@router.delete("/projects/{project_id}/files/{file_id}", response_model=MessageResponse, tags=["projects"])
def delete_project_file(
    project_id: int,
    file_id: int,
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    projects_service.project_files.delete(db, auth["company_id"], project_id, file_id)
    return {"success": True, "message": "File deleted successfully"}
