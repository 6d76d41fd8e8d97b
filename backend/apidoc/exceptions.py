"""
apidoc — Custom Exception Hierarchy
====================================

What:  Application-specific exceptions for the documentation subsystem.
How:   Each exception carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by the model builder, the cache and the documentation routes.

Exception Hierarchy:
    ApiDocError (base)           → 500 Internal Server Error
    ├── NotFoundError            → 404 Not Found (unknown route id)
    ├── DocumentBuildError       → 500 (route enumeration failed; cache stays empty)
    └── ConfigurationError       → 500 (unusable documentation settings)
"""

from typing import Any, Dict, Optional


class ApiDocError(Exception):
    """
    Base exception for all apidoc errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class NotFoundError(ApiDocError):
    """
    Raised when a requested resource does not exist.

    When:    GET /api/example/{id}.json with an id that is not in the model.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DocumentBuildError(ApiDocError):
    """
    Raised when the documentation model could not be built.

    When:    The route registry itself fails while being enumerated.
    HTTP:    500 Internal Server Error

    The cache releases its lock and stays EMPTY, so the next request
    retries the build.
    """

    def __init__(
        self,
        message: str = "The API documentation could not be built. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConfigurationError(ApiDocError):
    """
    Raised when documentation settings cannot be used as given.

    When:    Example path template without a route-id placeholder, etc.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Documentation is misconfigured",
        setting: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if setting:
            ctx["setting"] = setting
        super().__init__(message=message, context=ctx)
        self.setting = setting
