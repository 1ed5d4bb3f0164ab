from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_admin
from app.schemas.common import ListResponse, MessageResponse
from app.schemas.inventory import (
    MaterialCreate,
    MaterialRead,
    MaterialResult,
    MaterialUpdate,
    ProjectMaterialCreate,
    ProjectMaterialRead,
    ProjectMaterialResult,
    ProjectMaterialUpdate,
)
from app.services import inventory as inventory_service

router = APIRouter()


@router.get("/materials", response_model=ListResponse[MaterialRead], tags=["materials"])
def list_materials(
    category: str | None = None,
    search: str | None = None,
    order_by: str = Query(default="name"),
    order_dir: str = Query(default="asc", pattern="^(asc|desc)$"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    auth=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return inventory_service.materials.list_response(
        db, auth["company_id"], category, search, order_by, order_dir, limit, offset
    )


@router.get("/materials/categories", tags=["materials"])
def list_material_categories(auth=Depends(get_current_user), db: Session = Depends(get_db)):
    return {"success": True, "categories": inventory_service.materials.categories(db, auth["company_id"])}


@router.post(
    "/materials",
    response_model=MaterialResult,
    status_code=status.HTTP_201_CREATED,
    tags=["materials"],
)
def create_material(payload: MaterialCreate, auth=Depends(require_admin), db: Session = Depends(get_db)):
    material = inventory_service.materials.create(db, auth["company_id"], payload)
    return {"success": True, "message": "Material created successfully", "material": material}


@router.get("/materials/{material_id}", response_model=MaterialRead, tags=["materials"])
def get_material(material_id: int, auth=Depends(get_current_user), db: Session = Depends(get_db)):
    return inventory_service.materials.get(db, auth["company_id"], material_id)


@router.put("/materials/{material_id}", response_model=MaterialResult, tags=["materials"])
def update_material(
    material_id: int,
    payload: MaterialUpdate,
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    material = inventory_service.materials.update(db, auth["company_id"], material_id, payload)
    return {"success": True, "message": "Material updated successfully", "material": material}


@router.delete("/materials/{material_id}", response_model=MessageResponse, tags=["materials"])
def delete_material(material_id: int, auth=Depends(require_admin), db: Session = Depends(get_db)):
    inventory_service.materials.delete(db, auth["company_id"], material_id)
    return {"success": True, "message": "Material deleted successfully"}


# ── Project allocations ─────────────────────────────────────────


@router.get(
    "/project-materials/{project_id}",
    response_model=ListResponse[ProjectMaterialRead],
    tags=["project-materials"],
)
def list_project_materials(
    project_id: int,
    limit: int = Query(default=200, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    auth=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return inventory_service.project_materials.list_response(db, auth["company_id"], project_id, limit, offset)


@router.post(
    "/project-materials",
    response_model=ProjectMaterialResult,
    status_code=status.HTTP_201_CREATED,
    tags=["project-materials"],
)
def create_project_material(
    payload: ProjectMaterialCreate,
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    allocation = inventory_service.project_materials.create(db, auth["company_id"], payload)
    return {"success": True, "message": "Material assigned to project", "project_material": allocation}


@router.put(
    "/project-materials/{project_material_id}",
    response_model=ProjectMaterialResult,
    tags=["project-materials"],
)
def update_project_material(
    project_material_id: int,
    payload: ProjectMaterialUpdate,
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    allocation = inventory_service.project_materials.update(db, auth["company_id"], project_material_id, payload)
    return {"success": True, "message": "Project material updated", "project_material": allocation}


@router.delete(
    "/project-materials/{project_material_id}",
    response_model=MessageResponse,
    tags=["project-materials"],
)
def delete_project_material(
    project_material_id: int,
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    inventory_service.project_materials.delete(db, auth["company_id"], project_material_id)
    return {"success": True, "message": "Material removed from project"}
