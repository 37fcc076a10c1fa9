import time
import uuid
from sqlalchemy import String, Text, BigInteger, JSON
from sqlalchemy.orm import Mapped, mapped_column
from database import Base


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="active", index=True)
    sandbox_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sandbox_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    # Epoch milliseconds, the unit the editor UI works in
    created_at: Mapped[int] = mapped_column(BigInteger, default=now_ms)
    last_modified: Mapped[int] = mapped_column(BigInteger, default=now_ms)

    # "metadata" is reserved on declarative classes, so the attribute is renamed
    project_metadata: Mapped[dict] = mapped_column("metadata", JSON, default=dict)
    conversation: Mapped[dict] = mapped_column(JSON, default=dict)
    # {path: {content, lastModified, type}}
    files: Mapped[dict] = mapped_column(JSON, default=dict)
    settings: Mapped[dict] = mapped_column(JSON, default=dict)

    def touch(self) -> None:
        """Bump last_modified to now without ever moving it backwards."""
        self.last_modified = max(now_ms(), self.last_modified or 0, self.created_at or 0)
