# aibuilder/models/__init__.py

from .user import User
from .project import Project
from .project_file import ProjectFile, FileTypeEnum


def register_models():
    return [
        User,
        Project,
        ProjectFile,
    ]


__all__ = [
    "User",
    "Project",
    "ProjectFile", "FileTypeEnum",
    "register_models",
]
