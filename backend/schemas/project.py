"""Wire shapes for projects.

The editor UI speaks camelCase JSON, so every model here serializes with
camelCase aliases while still accepting snake_case names from Python code.
Nested objects are stored in the database exactly as they are dumped here
(``model_dump(by_alias=True, mode="json")``).
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ProjectStatus = Literal["active", "archived", "deleted"]
ProjectCategory = Literal["ecommerce", "logistics", "fullcommerce", "other"]
Framework = Literal["react", "vue", "angular", "other"]
FileType = Literal["component", "style", "config", "other"]
Theme = Literal["light", "dark", "auto"]
MessageRole = Literal["user", "assistant"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Nested project parts ---

class ProjectMetadata(CamelModel):
    category: Optional[ProjectCategory] = None
    target_url: Optional[str] = None
    style: Optional[str] = None
    framework: Optional[Framework] = None
    packages: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)


class MessageMetadata(CamelModel):
    edited_files: Optional[list[str]] = None
    added_packages: Optional[list[str]] = None
    edit_type: Optional[str] = None
    sandbox_id: Optional[str] = None


class ConversationMessage(CamelModel):
    id: str
    role: MessageRole
    content: str
    timestamp: int
    metadata: Optional[MessageMetadata] = None


class ScrapedWebsite(CamelModel):
    url: str
    content: Any = None
    timestamp: int


class GeneratedComponent(CamelModel):
    name: str
    path: str
    content: str


class AppliedCode(CamelModel):
    files: list[str] = Field(default_factory=list)
    timestamp: int


class ConversationContext(CamelModel):
    scraped_websites: list[ScrapedWebsite] = Field(default_factory=list)
    generated_components: list[GeneratedComponent] = Field(default_factory=list)
    applied_code: list[AppliedCode] = Field(default_factory=list)
    current_project: str = ""
    last_generated_code: Optional[str] = None


class Conversation(CamelModel):
    messages: list[ConversationMessage] = Field(default_factory=list)
    context: ConversationContext = Field(default_factory=ConversationContext)


class ProjectFile(CamelModel):
    content: str
    last_modified: int
    type: FileType = "other"


class ProjectSettings(CamelModel):
    # All optional: a PUT may carry only part of the settings, which then
    # replaces the stored object as-is.
    ai_model: Optional[str] = None
    auto_save: Optional[bool] = None
    theme: Optional[Theme] = None


# --- Requests ---

class ProjectCreate(CamelModel):
    # name and category are checked by the store
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    target_url: Optional[str] = None
    style: Optional[str] = None


class ProjectUpdate(CamelModel):
    """Partial update. Only the keys present in the body are applied, and each
    nested object replaces the stored one wholesale."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    sandbox_id: Optional[str] = None
    sandbox_url: Optional[str] = None
    metadata: Optional[ProjectMetadata] = None
    conversation: Optional[Conversation] = None
    files: Optional[dict[str, ProjectFile]] = None
    settings: Optional[ProjectSettings] = None

    def to_fields(self) -> dict[str, Any]:
        """Return the fields that were sent, keyed by attribute name, with
        nested values in their stored JSON form."""
        dumped = self.model_dump(exclude_unset=True, by_alias=True, mode="json")
        return {
            name: dumped[field.alias or name]
            for name, field in type(self).model_fields.items()
            if name in self.model_fields_set
        }


# --- Responses ---

class ProjectResponse(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    created_at: int
    last_modified: int
    sandbox_id: Optional[str] = None
    sandbox_url: Optional[str] = None
    status: ProjectStatus
    metadata: ProjectMetadata
    conversation: Conversation
    files: dict[str, ProjectFile]
    settings: ProjectSettings

    @classmethod
    def from_project(cls, project) -> "ProjectResponse":
        return cls(
            id=project.id,
            name=project.name,
            description=project.description,
            created_at=project.created_at,
            last_modified=project.last_modified,
            sandbox_id=project.sandbox_id,
            sandbox_url=project.sandbox_url,
            status=project.status,
            metadata=project.project_metadata or {},
            conversation=project.conversation or {},
            files=project.files or {},
            settings=project.settings,
        )


class ProjectListResponse(CamelModel):
    projects: list[ProjectResponse]
    total_count: int
    last_sync: int


class DeleteResponse(BaseModel):
    success: bool
