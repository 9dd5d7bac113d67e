"""Exception hierarchy for entitlecore.

Every error raised by the engine inherits from EntitleCoreError. This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for protocol mapping
- gRPC error handler decorator for services enforcing decisions server-side

A *deny* is never an exception: permission and entitlement checks return False.
Exceptions are reserved for programmer errors (unknown permission tokens),
malformed input, and explicit ``assert_*`` enforcement helpers.

Usage in services:
    from entitlecore.exceptions import (
        EntitleCoreError,
        PermissionDeniedError,
        grpc_error_handler,
    )
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "EntitleCoreError",
    "ConfigurationError",
    "CatalogViolationError",
    "InvalidInputError",
    "PermissionDeniedError",
    "StoreError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
    # gRPC helpers
    "get_grpc_status_code",
    "grpc_error_handler",
]

logger = logging.getLogger(__name__)


# ---- Exception Hierarchy ----------------------------------------------------


class EntitleCoreError(Exception):
    """Base exception for the authorization engine.

    Attributes:
        code: Stable error code string for protocol mapping (e.g. "CATALOG_VIOLATION").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(EntitleCoreError):
    """Invalid or missing configuration."""

    code: str = "CONFIGURATION_ERROR"
    message: str = "Invalid configuration"


class CatalogViolationError(EntitleCoreError):
    """A permission token, role map or gated action outside the catalog.

    Always a bug in the calling code, never an authorization outcome.
    """

    code: str = "CATALOG_VIOLATION"
    message: str = "Permission catalog violation"


class InvalidInputError(EntitleCoreError):
    """Malformed caller input (e.g. blank actor or workspace identifier)."""

    code: str = "INVALID_INPUT"
    message: str = "Invalid input"


class PermissionDeniedError(EntitleCoreError):
    """Raised by enforcement helpers when a required permission is not held."""

    code: str = "PERMISSION_DENIED"
    message: str = "Permission denied"


class StoreError(EntitleCoreError):
    """Membership or subscription store failure."""

    code: str = "STORE_ERROR"
    message: str = "Backing store unavailable"


# ---- Error Registry for Protocol Mapping ------------------------------------

_E = TypeVar("_E", bound=type[EntitleCoreError])


class ErrorRegistry:
    """Registry for mapping internal errors to external protocol codes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[EntitleCoreError]] = {}

    def register(self, code: str, error_cls: type[EntitleCoreError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[EntitleCoreError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[EntitleCoreError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("SEAT_LIMIT_REACHED")
        class SeatLimitError(EntitleCoreError):
            code = "SEAT_LIMIT_REACHED"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


error_registry.register("INTERNAL_ERROR", EntitleCoreError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("CATALOG_VIOLATION", CatalogViolationError)
error_registry.register("INVALID_INPUT", InvalidInputError)
error_registry.register("PERMISSION_DENIED", PermissionDeniedError)
error_registry.register("STORE_ERROR", StoreError)


# ---- gRPC Error Handling Utilities ------------------------------------------

# Status per base error class. Registered subclasses inherit their parent's status.
_STATUS_BY_BASE: dict[type[EntitleCoreError], str] = {
    PermissionDeniedError: "PERMISSION_DENIED",
    InvalidInputError: "INVALID_ARGUMENT",
    ConfigurationError: "FAILED_PRECONDITION",
    CatalogViolationError: "INTERNAL",
    StoreError: "UNAVAILABLE",
}


def get_grpc_status_code(error: EntitleCoreError) -> Any:
    """Map an EntitleCoreError to a grpc.StatusCode.

    The error class is looked up in ``error_registry`` by code (falling back to
    the instance's own class), then its MRO is walked until a base with a known
    status is found. A ``SeatLimitError(PermissionDeniedError)`` registered under
    ``SEAT_LIMIT_REACHED`` therefore maps to PERMISSION_DENIED.

    Import grpc locally to avoid hard dependency at module level.
    """
    import grpc

    error_cls = error_registry.get(error.code) or type(error)
    for base in error_cls.__mro__:
        name = _STATUS_BY_BASE.get(base)
        if name is not None:
            return getattr(grpc.StatusCode, name)
    return grpc.StatusCode.INTERNAL


def _trailing_metadata(error: EntitleCoreError) -> list[tuple[str, str]]:
    metadata = [("error-code", error.code)]
    permission = error.details.get("permission")
    if permission is not None:
        metadata.append(("required-permission", str(permission)))
    return metadata


def grpc_error_handler(method):
    """Decorator for unary gRPC service methods that enforce decisions.

    Denials (``PermissionDeniedError`` and registered subclasses) are logged at
    WARNING, since refusing a caller is normal operation; every other engine
    error is logged at ERROR. Both abort with the mapped status and carry the
    error code, plus the missing permission for denials, as trailing metadata.
    Anything else aborts with INTERNAL without echoing the exception text.

    Usage:
        @grpc_error_handler
        async def InviteMember(self, request, context):
            access = await engine.snapshot(request.actor_id, request.workspace_id)
            resolver.assert_permission(access.role, Permission.MEMBER_INVITE)
            ...
    """

    @functools.wraps(method)
    async def wrapper(self, request, context):
        try:
            return await method(self, request, context)
        except EntitleCoreError as e:
            status_code = get_grpc_status_code(e)
            level = logging.WARNING if isinstance(e, PermissionDeniedError) else logging.ERROR
            logger.log(
                level,
                "%s refused (%s): %s",
                method.__name__,
                e.code,
                e.message,
                extra={"error_code": e.code, "error_details": e.details},
            )
            context.set_trailing_metadata(_trailing_metadata(e))
            await context.abort(status_code, f"[{e.code}] {e.message}")
            return
        except Exception as e:
            import grpc

            logger.exception("%s failed with %s", method.__name__, type(e).__name__)
            await context.abort(grpc.StatusCode.INTERNAL, f"Unexpected {type(e).__name__}")
            return

    return wrapper
