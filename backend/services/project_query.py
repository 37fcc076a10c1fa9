"""Filtering and sorting of project listings.

Works on any sequence of project records (ORM rows or anything with the
same attributes) and never mutates it.
"""

from dataclasses import dataclass
from typing import Literal, Optional, Sequence, get_args

from pydantic import BaseModel, field_validator

from models.project import Project, now_ms

SortKey = Literal["name", "createdAt", "lastModified"]
SortOrder = Literal["asc", "desc"]


class ProjectFilters(BaseModel):
    # Plain equality: a status no project has simply matches nothing
    status: Optional[str] = None
    category: Optional[str] = None
    search: Optional[str] = None
    sort_by: SortKey = "lastModified"
    sort_order: SortOrder = "desc"

    @field_validator("status", "category", "search", mode="before")
    @classmethod
    def _blank_is_unset(cls, value):
        # ?status=&search= from a form means "no preference"
        return None if value == "" else value

    @field_validator("sort_by", "sort_order", mode="before")
    @classmethod
    def _unknown_sort_is_default(cls, value, info):
        allowed = get_args(SortKey if info.field_name == "sort_by" else SortOrder)
        if value not in allowed:
            return cls.model_fields[info.field_name].default
        return value


@dataclass
class ProjectListResult:
    projects: list[Project]
    total_count: int
    last_sync: int


def matches(project: Project, filters: ProjectFilters) -> bool:
    if filters.status and project.status != filters.status:
        return False
    metadata = project.project_metadata or {}
    if filters.category and metadata.get("category") != filters.category:
        return False
    if filters.search:
        term = filters.search.lower()
        haystacks = (project.name, project.description, metadata.get("targetUrl"))
        return any(h and term in h.lower() for h in haystacks)
    return True


def _sort_value(project: Project, sort_by: str):
    if sort_by == "name":
        return (project.name or "").lower()
    if sort_by == "createdAt":
        return project.created_at
    return project.last_modified


def query_projects(
    projects: Sequence[Project],
    filters: ProjectFilters,
    now: Optional[int] = None,
) -> ProjectListResult:
    """Apply filters (ANDed) then a stable sort; ties keep input order."""
    selected = [p for p in projects if matches(p, filters)]
    selected.sort(
        key=lambda p: _sort_value(p, filters.sort_by),
        reverse=filters.sort_order == "desc",
    )
    return ProjectListResult(
        projects=selected,
        total_count=len(selected),
        last_sync=now if now is not None else now_ms(),
    )
