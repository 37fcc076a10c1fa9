import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator, get_args

from pydantic import BaseModel, TypeAdapter, ValidationError as SchemaError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import get_settings
from errors import InternalError, NotFoundError, ValidationError
from models.project import Project, now_ms
from schemas.project import (
    Conversation,
    ProjectCategory,
    ProjectFile,
    ProjectMetadata,
    ProjectSettings,
    ProjectStatus,
)

logger = logging.getLogger(__name__)

VALID_STATUSES = set(get_args(ProjectStatus))
VALID_CATEGORIES = set(get_args(ProjectCategory))

# Update keys that map onto a differently named attribute
_ATTRIBUTE_FOR = {"metadata": "project_metadata"}

# Nested structures are validated and then replace the stored value wholesale
_NESTED_ADAPTERS: dict[str, TypeAdapter] = {
    "metadata": TypeAdapter(ProjectMetadata),
    "conversation": TypeAdapter(Conversation),
    "files": TypeAdapter(dict[str, ProjectFile]),
    "settings": TypeAdapter(ProjectSettings),
}

_PLAIN_FIELDS = {"name", "description", "status", "sandbox_id", "sandbox_url"}
_READ_ONLY_FIELDS = {"id", "created_at", "last_modified"}


class ProjectStore(ABC):
    """Storage contract for project records.

    Implementations must keep ids immutable and unique, bump ``last_modified``
    on every mutation, and never physically remove a record.
    """

    @abstractmethod
    def create(
        self,
        name: str | None,
        description: str | None = None,
        category: str | None = None,
        target_url: str | None = None,
        style: str | None = None,
    ) -> Project:
        """Create an active project. Raises ValidationError on a missing name."""
        ...

    @abstractmethod
    def get(self, project_id: str) -> Project:
        """Return the project or raise NotFoundError."""
        ...

    @abstractmethod
    def update(self, project_id: str, fields: dict[str, Any]) -> Project:
        """
        Shallow-merge ``fields`` into the project.

        Top-level keys replace the stored value outright: passing ``metadata``
        swaps the whole metadata object, sub-fields are not merged.
        """
        ...

    @abstractmethod
    def soft_delete(self, project_id: str) -> None:
        """Flip status to 'deleted'. The record stays retrievable."""
        ...

    @abstractmethod
    def list(self) -> list[Project]:
        """All projects regardless of status, oldest first."""
        ...


class SqlAlchemyProjectStore(ProjectStore):
    """ProjectStore backed by the SQLAlchemy session of the current request."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, name, description=None, category=None, target_url=None, style=None) -> Project:
        name = _require_name(name)
        if category is not None and category not in VALID_CATEGORIES:
            raise ValidationError(
                f"Invalid category. Must be one of: {', '.join(sorted(VALID_CATEGORIES))}"
            )

        settings = get_settings()
        now = now_ms()
        project = Project(
            name=name,
            description=description or "",
            status="active",
            created_at=now,
            last_modified=now,
            project_metadata=_dump(ProjectMetadata(
                category=category or "other",
                target_url=target_url,
                style=style,
                framework=settings.DEFAULT_FRAMEWORK,
            )),
            conversation=_dump(Conversation(context={"current_project": name})),
            files={},
            settings=_dump(ProjectSettings(
                ai_model=settings.DEFAULT_AI_MODEL,
                auto_save=settings.DEFAULT_AUTOSAVE,
                theme=settings.DEFAULT_THEME,
            )),
        )
        with self._db_errors("Failed to create project"):
            self.db.add(project)
            self.db.commit()
            self.db.refresh(project)
        logger.info(f"Created project {project.id} ({project.name!r})")
        return project

    def get(self, project_id: str) -> Project:
        with self._db_errors("Failed to fetch project"):
            project = self.db.query(Project).filter(Project.id == project_id).first()
        if not project:
            raise NotFoundError()
        return project

    def update(self, project_id: str, fields: dict[str, Any]) -> Project:
        with self._db_errors("Failed to update project"):
            project = (
                self.db.query(Project)
                .filter(Project.id == project_id)
                .with_for_update()
                .first()
            )
        if not project:
            raise NotFoundError()

        try:
            changes = _clean_changes(fields)
            if project.status == "deleted" and changes.get("status", "deleted") != "deleted":
                raise ValidationError("Deleted projects cannot be restored")
        except ValidationError:
            self.db.rollback()
            raise

        with self._db_errors("Failed to update project"):
            for key, value in changes.items():
                setattr(project, _ATTRIBUTE_FOR.get(key, key), value)
            project.touch()
            self.db.commit()
            self.db.refresh(project)
        return project

    def soft_delete(self, project_id: str) -> None:
        with self._db_errors("Failed to delete project"):
            project = (
                self.db.query(Project)
                .filter(Project.id == project_id)
                .with_for_update()
                .first()
            )
            if not project:
                raise NotFoundError()
            project.status = "deleted"
            project.touch()
            self.db.commit()
        logger.info(f"Soft-deleted project {project_id}")

    def list(self) -> list[Project]:
        with self._db_errors("Failed to fetch projects"):
            return self.db.query(Project).order_by(Project.created_at).all()

    @contextmanager
    def _db_errors(self, message: str) -> Iterator[None]:
        """Roll back and re-raise database failures as InternalError(message)."""
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception(f"{message}: {exc}")
            raise InternalError(message) from exc


def _require_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Project name is required")
    return name.strip()


def _dump(model: BaseModel) -> dict:
    return model.model_dump(by_alias=True, mode="json")


def _clean_changes(fields: dict[str, Any]) -> dict[str, Any]:
    """Validate an update payload and normalize nested values to stored JSON."""
    changes: dict[str, Any] = {}
    for key, value in fields.items():
        if key in _READ_ONLY_FIELDS:
            raise ValidationError(f"Field '{key}' cannot be changed")
        if key == "name":
            changes[key] = _require_name(value)
        elif key == "status":
            if value not in VALID_STATUSES:
                raise ValidationError(
                    f"Invalid status. Must be one of: {', '.join(sorted(VALID_STATUSES))}"
                )
            changes[key] = value
        elif key in _PLAIN_FIELDS:
            changes[key] = value
        elif key in _NESTED_ADAPTERS:
            if value is None:
                raise ValidationError(f"Field '{key}' cannot be null")
            adapter = _NESTED_ADAPTERS[key]
            try:
                validated = adapter.validate_python(value)
            except SchemaError as exc:
                raise ValidationError(f"Invalid {key}: {exc.errors()[0]['msg']}") from exc
            changes[key] = adapter.dump_python(validated, by_alias=True, mode="json")
        else:
            raise ValidationError(f"Unknown project field: {key}")
    return changes
