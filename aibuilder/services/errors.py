# aibuilder/services/errors.py
"""
Errors raised by the service layer. Each carries an API-friendly ``code``
(same snake_case style as ``email_exists``) and the HTTP status the RPC
layer maps it to.
"""


class ServiceError(Exception):
    code = "server_error"
    status = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class InvalidInput(ServiceError):
    code = "bad_request"
    status = 400
    default_message = "Invalid input"

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message, "field": self.field}


class NotFoundOrUnauthorized(ServiceError):
    code = "not_found"
    status = 404
    default_message = "Project not found or access denied"


class UserNotFound(ServiceError):
    code = "user_not_found"
    status = 404


class PathConflict(ServiceError):
    code = "path_conflict"
    status = 409
    default_message = "File path already exists in project"


class ParentNotFound(ServiceError):
    code = "parent_not_found"
    status = 400
    default_message = "Parent directory not found"


class ParentNotDirectory(ServiceError):
    code = "parent_not_directory"
    status = 400
    default_message = "Parent must be a directory"


class InvalidParent(ServiceError):
    code = "invalid_parent"
    status = 400
    default_message = "A directory cannot be moved inside itself"


class DirectoryNotEmpty(ServiceError):
    code = "directory_not_empty"
    status = 409
    default_message = "Cannot delete directory that contains files or subdirectories"


class EmailAlreadyExists(ServiceError):
    code = "email_exists"
    status = 409
    default_message = "User with this email already exists"


class InvalidCredentials(ServiceError):
    code = "invalid_credentials"
    status = 401
    default_message = "Invalid email or password"


class UnsupportedGenerationType(ServiceError):
    code = "unsupported_generation_type"
    status = 400

    def __init__(self, generation_type):
        self.generation_type = generation_type
        super().__init__(f"Unsupported generation type: {generation_type}")


class EmptyProject(ServiceError):
    code = "empty_project"
    status = 400
    default_message = "No files found in project"


class Forbidden(ServiceError):
    code = "forbidden"
    status = 403
    default_message = "Acting user does not match the authenticated user"
