from enum import Enum
from datetime import datetime
from sqlalchemy import String, Text, ForeignKey, Integer, DateTime, UniqueConstraint, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db.base import Base
from .clock import utcnow


class FileTypeEnum(str, Enum):
    file = "file"
    directory = "directory"


class ProjectFile(Base):
    __tablename__ = "project_files"
    __table_args__ = (
        UniqueConstraint("project_id", "path", name="uq_project_files_project_path"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    path: Mapped[str] = mapped_column(String(1024), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    file_type: Mapped[FileTypeEnum] = mapped_column(
        SAEnum(FileTypeEnum, name="file_type"), nullable=False
    )
    # self-reference; directory-ness of the parent is checked in services.files
    parent_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("project_files.id"), nullable=True, index=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    project = relationship("Project", back_populates="files")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "path": self.path,
            "content": self.content,
            "file_type": self.file_type.value,
            "parent_id": self.parent_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
