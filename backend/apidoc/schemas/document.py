"""
apidoc — Documentation Model Schemas
=====================================

What:  Pydantic models for everything the documentation endpoints return,
       plus the copyright block that configures the builder.
How:   Published records are frozen and hold tuples, so a model handed to
       readers cannot be changed in place. FastAPI serializes them directly.
Who:   Built by apidoc.core, returned by apidoc.routes.docs.

Shape of GET /api/info:
    [
        {
            "name": "User-UserController",
            "index": 0,
            "routes": [
                {
                    "id": "5f0c1b0e9a7d3c21",
                    "urls": ["/users/{user_id}"],
                    "methods": ["GET"],
                    "params": [...],
                    "responses": [{"code": 200, "msg": "ok"}],
                    "return_fields": [...],
                    "return_json": "{...}",
                    "title": "Get user",
                    ...
                    "example_url": "http://host/api/example/5f0c1b0e9a7d3c21.json"
                }
            ]
        }
    ]
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional, Tuple

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Building Blocks
# ══════════════════════════════════════════════════════════════════════════


class ResponseCode(BaseModel):
    """One entry of a response-code catalog (e.g. 404 → "user not found")."""
    code: int = Field(description="HTTP status or business code")
    msg: str = Field(default="", description="Meaning of the code")

    model_config = {"frozen": True}


class ParamDescriptor(BaseModel):
    """A single request parameter as declared by the route handler."""
    name: str = Field(description="Parameter name as sent by the client (alias if any)")
    type: str = Field(description="Declared Python type, e.g. int, str, List[int]")
    location: str = Field(description="Where it is read from: path, query, header, cookie, body")
    required: bool = Field(default=False)
    default: str = Field(default="", description="Rendered default value, empty if none")
    example: str = Field(default="", description="First declared example, empty if none")
    desc: str = Field(default="", description="Declared description")

    model_config = {"frozen": True}


class ReturnField(BaseModel):
    """A single field of the route's response body."""
    name: str = Field(description="Field name, or dotted path at record level")
    type: str = Field(description="JSON schema type (object, array, string, ...)")
    desc: str = Field(default="")
    parent: str = Field(default="", description="Dotted path of the enclosing field")
    required: bool = Field(default=False)

    model_config = {"frozen": True}


# ══════════════════════════════════════════════════════════════════════════
# Configuration Block
# ══════════════════════════════════════════════════════════════════════════


class DocumentCopyright(BaseModel):
    """
    What:  Process-wide documentation settings, immutable for the process life.
    Who:   Produced by Settings.document_copyright(); consumed by the builder.

    `online=True` is the production switch: documentation is then hidden
    and every endpoint answers with an empty result.
    """
    title: str = ""
    team: str = ""
    version: str = ""
    copyright: str = ""
    online: bool = False
    ignore_url_set: FrozenSet[str] = frozenset()
    global_response: Tuple[ResponseCode, ...] = ()
    return_record_level: bool = False
    comment_in_return_example: bool = True

    model_config = {"frozen": True}


# ══════════════════════════════════════════════════════════════════════════
# Published Documentation Records
# ══════════════════════════════════════════════════════════════════════════


class RouteDoc(BaseModel):
    """
    What:  Everything known about one documented handler.
    Who:   Listed under its module(s) by GET /api/info; its return_json is
           served by GET /api/example/{id}.json.
    """
    id: str = Field(description="Deterministic id derived from methods and URLs")
    urls: Tuple[str, ...] = Field(description="URL patterns, registration order")
    methods: Tuple[str, ...] = Field(description="HTTP methods, upper-case")
    params: Tuple[ParamDescriptor, ...] = ()
    responses: Tuple[ResponseCode, ...] = ()
    return_fields: Tuple[ReturnField, ...] = ()
    return_json: str = Field(default="", description="Example response body")
    title: str = ""
    desc: str = ""
    develop: bool = Field(default=False, description="Still under development")
    index: int = Field(default=0, description="Display order inside its module")
    comment_in_return_example: bool = True
    example_url: str = ""

    model_config = {"frozen": True}


class ModuleDoc(BaseModel):
    """A named group of routes, sorted by route index."""
    name: str
    index: int = Field(default=0, description="Display order among modules")
    routes: Tuple[RouteDoc, ...] = ()

    model_config = {"frozen": True}


@dataclass(frozen=True)
class DocumentedModel:
    """
    What:  The cached artifact: ordered modules plus an id index.
    How:   `routes_by_id` is a read-only mapping proxy; modules are tuples of
           frozen records. Published once, shared by every reader.
    """
    modules: Tuple[ModuleDoc, ...] = ()
    routes_by_id: Mapping[str, RouteDoc] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def group_count(self) -> int:
        return len(self.modules)

    @property
    def api_count(self) -> int:
        """Total route entries across modules (fan-out routes count once per module)."""
        return sum(len(module.routes) for module in self.modules)

    def find(self, route_id: str) -> Optional[RouteDoc]:
        return self.routes_by_id.get(route_id)


# ══════════════════════════════════════════════════════════════════════════
# Endpoint Responses
# ══════════════════════════════════════════════════════════════════════════


class VersionInfo(BaseModel):
    """
    What:  Copyright summary returned by GET /api/version.
    How:   Counts are computed from the built model, so the first call
           triggers the build.
    """
    title: str = ""
    team: str = ""
    version: str = ""
    copyright: str = ""
    comment_in_return_example: bool = True
    return_record_level: bool = Field(default=False, description="Return fields named by dotted path")
    global_response: Tuple[ResponseCode, ...] = Field(
        default=(), description="Response codes of routes that declare none"
    )
    group_count: int = Field(default=0, description="Number of modules")
    api_count: int = Field(default=0, description="Route entries across all modules")


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "route with ID 'abc' was not found",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response: service status and documentation cache state."""
    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    documentation: str = Field(description="Cache state: disabled, empty, building, ready")
    uptime_seconds: float = Field(description="Seconds since service started")
