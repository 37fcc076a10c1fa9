from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from config import get_settings
from database import get_db
from rate_limit import limiter
from schemas.project import (
    DeleteResponse,
    ProjectCreate,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdate,
)
from services.project_query import ProjectFilters, query_projects
from services.project_store import ProjectStore, SqlAlchemyProjectStore


router = APIRouter(prefix="/projects", tags=["projects"])


def get_project_store(db: Session = Depends(get_db)) -> ProjectStore:
    return SqlAlchemyProjectStore(db)


# --- Routes ---

@router.get("", response_model=ProjectListResponse)
def list_projects(
    status: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    store: ProjectStore = Depends(get_project_store),
):
    filters = ProjectFilters(
        status=status,
        category=category,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )

    result = query_projects(store.list(), filters)
    return ProjectListResponse(
        projects=[ProjectResponse.from_project(p) for p in result.projects],
        total_count=result.total_count,
        last_sync=result.last_sync,
    )


@router.post("", response_model=ProjectResponse, status_code=201)
@limiter.limit(lambda: get_settings().CREATE_RATE_LIMIT)
def create_project(
    request: Request,
    payload: ProjectCreate,
    store: ProjectStore = Depends(get_project_store),
):
    project = store.create(
        name=payload.name,
        description=payload.description,
        category=payload.category,
        target_url=payload.target_url,
        style=payload.style,
    )
    return ProjectResponse.from_project(project)


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(project_id: str, store: ProjectStore = Depends(get_project_store)):
    return ProjectResponse.from_project(store.get(project_id))


@router.put("/{project_id}", response_model=ProjectResponse)
def update_project(
    project_id: str,
    payload: ProjectUpdate,
    store: ProjectStore = Depends(get_project_store),
):
    project = store.update(project_id, payload.to_fields())
    return ProjectResponse.from_project(project)


@router.delete("/{project_id}", response_model=DeleteResponse)
def delete_project(project_id: str, store: ProjectStore = Depends(get_project_store)):
    store.soft_delete(project_id)
    return DeleteResponse(success=True)
