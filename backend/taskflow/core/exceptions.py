"""
Custom Exceptions for Taskflow
==============================

Every failure the task engine can produce is one of these. The API layer
renders them through a single exception handler, so endpoints never build
HTTPException for domain errors.

Usage:
    from taskflow.core.exceptions import TaskNotFoundError, AuthorizationError

    if task is None:
        raise TaskNotFoundError(task_id)
"""

from typing import Optional, Any, Dict


class TaskflowError(Exception):
    """Base exception for all Taskflow errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detail": self.message,
            "code": self.code,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(TaskflowError):
    """Missing or unusable credential"""

    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTH_FAILED")


class InvalidTokenError(AuthenticationError):
    """JWT token is invalid or expired"""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)
        self.code = "INVALID_TOKEN"


class InvalidCredentialsError(AuthenticationError):
    """Email/password pair did not match"""

    def __init__(self):
        super().__init__("Invalid credentials")
        self.code = "INVALID_CREDENTIALS"


class AuthorizationError(TaskflowError):
    """Authenticated, but not allowed to perform this action"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(TaskflowError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class TaskNotFoundError(ResourceNotFoundError):
    """Task not found"""

    def __init__(self, task_id: str):
        super().__init__("Task", task_id)


class UserNotFoundError(ResourceNotFoundError):
    """User not found"""

    def __init__(self, user_id: str):
        super().__init__("User", user_id)


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(TaskflowError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class InvalidAssigneeError(ValidationError):
    """Assignment target does not resolve to an existing user"""

    def __init__(self, user_id: str):
        super().__init__(f"Cannot assign task: user '{user_id}' does not exist", field="targetUserId")
        self.code = "INVALID_ASSIGNEE"
        self.details["user_id"] = user_id


class EmailAlreadyRegisteredError(ValidationError):
    """Email is already used by another account"""

    def __init__(self, email: str):
        super().__init__("Email already registered", field="email")
        self.code = "EMAIL_TAKEN"
        self.details["email"] = email


def error_response(error: TaskflowError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return error.to_dict()
