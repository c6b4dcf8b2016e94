"""
Structured exceptions and error responses for the scheduler.

Provides consistent error handling for graph mutations and scheduling with:
- Custom exception classes (not found / invalid argument / conflict)
- Structured error response format
- FastAPI exception handlers for a host application
"""

from typing import Any, Dict, List, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError


# =============================================================================
# Error Response Schema
# =============================================================================

class ErrorDetail(BaseModel):
    """Detail of a single error."""
    loc: Optional[List[str]] = None
    msg: str
    type: str


class ErrorResponse(BaseModel):
    """Structured error response format."""
    error: str  # Error code (e.g., "not_found", "cycle_detected")
    message: str  # Human-readable message
    details: Optional[List[ErrorDetail]] = None


def validation_details(exc: ValidationError) -> List[Dict[str, Any]]:
    """Flatten a pydantic ValidationError into ErrorDetail dicts."""
    return [
        {
            "loc": [str(part) for part in error["loc"]],
            "msg": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]


# =============================================================================
# Custom Exceptions
# =============================================================================

class SchedulingException(Exception):
    """Base exception for all scheduler errors."""

    kind = "internal"

    def __init__(
        self,
        message: str,
        error_code: str = "internal_error",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class NotFoundError(SchedulingException):
    """Unknown task or edge."""

    kind = "not_found"

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"{resource} with ID {resource_id} not found",
            error_code="not_found",
            status_code=status.HTTP_404_NOT_FOUND,
        )
        self.resource = resource
        self.resource_id = resource_id


class InvalidArgumentError(SchedulingException):
    """Malformed edge or input that can never be valid."""

    kind = "invalid_argument"

    def __init__(
        self,
        message: str,
        error_code: str = "invalid_argument",
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class SelfDependencyError(InvalidArgumentError):
    """Task cannot depend on itself."""

    def __init__(self, task_id: str):
        super().__init__(
            message="A task cannot depend on itself",
            error_code="self_dependency",
        )
        self.task_id = task_id


class InvalidSnapshotError(InvalidArgumentError):
    """A scheduling snapshot violates the caller contract (e.g. dangling edge)."""

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(
            message=message,
            error_code="invalid_snapshot",
            details=details,
        )


class ConflictError(SchedulingException):
    """The request conflicts with the current edge set."""

    kind = "conflict"

    def __init__(
        self,
        message: str,
        reason: str,
        error_code: str = "conflict",
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status.HTTP_409_CONFLICT,
            details=details,
        )
        self.reason = reason


class DuplicateDependencyError(ConflictError):
    """Dependency already exists."""

    kind = "duplicate"

    def __init__(self, predecessor_id: str, successor_id: str):
        super().__init__(
            message="This dependency already exists",
            reason="duplicate",
            error_code="duplicate_dependency",
        )
        self.predecessor_id = predecessor_id
        self.successor_id = successor_id


class CycleDetectedError(ConflictError):
    """Adding a dependency would create a cycle."""

    kind = "circular"

    def __init__(self, predecessor_id: str, successor_id: str, cycle_path: List[str]):
        super().__init__(
            message="Adding this dependency would create a cycle in the task graph",
            reason="circular",
            error_code="cycle_detected",
            details=[{
                "loc": ["cycle"] + [str(task_id) for task_id in cycle_path],
                "msg": f"Dependency {predecessor_id} -> {successor_id} would create a cycle: "
                       + " -> ".join(str(task_id) for task_id in cycle_path),
                "type": "cycle_error",
            }],
        )
        self.predecessor_id = predecessor_id
        self.successor_id = successor_id
        self.cycle_path = list(cycle_path)


# =============================================================================
# Exception Handlers
# =============================================================================

async def scheduling_exception_handler(request: Request, exc: SchedulingException) -> JSONResponse:
    """Handle SchedulingException and return structured response."""
    body = ErrorResponse(
        error=exc.error_code,
        message=exc.message,
        details=[ErrorDetail(**detail) for detail in exc.details] if exc.details else None,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(),
    )


def register_exception_handlers(app):
    """Register the scheduler's exception handlers with a host FastAPI app."""
    app.add_exception_handler(SchedulingException, scheduling_exception_handler)
