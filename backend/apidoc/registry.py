"""
apidoc — Route Registry
========================

What:  Enumerates the host application's registered handlers as
       framework-neutral `HandlerDescriptor`s.
How:   `FastAPIRouteRegistry` walks `app.routes` each time `handlers()` is
       called, so routes added after startup are picked up by the next build.
Who:   Called by DocumentModelCache when it builds the model.

Merging:
    FastAPI registers one APIRoute per path. A function decorated twice
    (`@app.get("/quotes")` and `@app.get("/quotes/")`) yields two routes
    with the same endpoint; they are merged into one descriptor carrying
    both URLs, in registration order.
"""

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from types import ModuleType
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from fastapi import FastAPI
from fastapi.datastructures import DefaultPlaceholder
from fastapi.responses import (
    FileResponse,
    HTMLResponse,
    RedirectResponse,
    StreamingResponse,
)
from fastapi.routing import APIRoute

# Response classes that render a page or hand off elsewhere instead of a data body
NON_BODY_RESPONSES = (HTMLResponse, RedirectResponse, FileResponse, StreamingResponse)

# Methods every route answers implicitly; never documented
IMPLICIT_METHODS = {"HEAD", "OPTIONS"}


@dataclass(frozen=True)
class HandlerDescriptor:
    """
    One documentable handler as seen by the model builder.

    Attributes:
        urls:         URL patterns mapped to the handler, registration order
        methods:      HTTP methods, upper-case, sorted
        endpoint:     The handler callable (metadata markers live on it)
        owner:        Enclosing class or module (group-level markers live on it)
        owner_name:   Simple name of the owner, used for the default module name
        returns_body: False for page/redirect/file/stream handlers
        route:        The framework route object, for framework-specific fallbacks
    """
    urls: Tuple[str, ...]
    methods: Tuple[str, ...]
    endpoint: Callable[..., Any]
    owner: Any = None
    owner_name: str = ""
    returns_body: bool = True
    route: Any = None

    @property
    def qualified_name(self) -> str:
        """Dotted name of the endpoint, for log messages."""
        module = getattr(self.endpoint, "__module__", "") or ""
        name = getattr(self.endpoint, "__qualname__", None) or repr(self.endpoint)
        return f"{module}.{name}" if module else name


class RouteRegistry(ABC):
    """
    Source of handlers for the model builder.

    Implementations:
        - FastAPIRouteRegistry: introspects a FastAPI app (default)
        - Test doubles: return a fixed list and count calls
    """

    @abstractmethod
    def handlers(self) -> List[HandlerDescriptor]:
        """Returns every registered handler, in registration order."""
        ...


def normalize_methods(methods: Optional[Iterable[str]]) -> Tuple[str, ...]:
    """Upper-cases, de-duplicates and sorts methods, dropping HEAD/OPTIONS."""
    return tuple(sorted({m.upper() for m in methods or ()} - IMPLICIT_METHODS))


def resolve_owner(endpoint: Callable[..., Any]) -> Tuple[Any, str]:
    """
    Finds the enclosing group of a handler.

    Returns:
        (owner, simple_name): the class of a bound method (or the class itself
        for a classmethod), otherwise the module the function is defined in.
    """
    bound_self = getattr(endpoint, "__self__", None)
    if bound_self is not None and not isinstance(bound_self, ModuleType):
        owner = bound_self if isinstance(bound_self, type) else type(bound_self)
        return owner, owner.__name__
    module_name = getattr(endpoint, "__module__", None) or ""
    return sys.modules.get(module_name), module_name.rsplit(".", 1)[-1]


def returns_body(route: APIRoute) -> bool:
    """True unless the route renders HTML, redirects, serves a file or streams."""
    response_class = route.response_class
    if isinstance(response_class, DefaultPlaceholder):
        response_class = response_class.value
    if isinstance(response_class, type) and issubclass(response_class, NON_BODY_RESPONSES):
        return False
    # `-> RedirectResponse` style handlers keep the default response class
    annotation = getattr(route.endpoint, "__annotations__", {}).get("return")
    if isinstance(annotation, type) and issubclass(annotation, NON_BODY_RESPONSES):
        return False
    return True


class FastAPIRouteRegistry(RouteRegistry):
    """Enumerates `APIRoute`s of a FastAPI application; mounts and plain Starlette routes are skipped."""

    def __init__(self, app: FastAPI):
        self.app = app

    def handlers(self) -> List[HandlerDescriptor]:
        merged: Dict[Tuple[Any, int, Tuple[str, ...]], HandlerDescriptor] = {}
        for route in self.app.routes:
            if not isinstance(route, APIRoute):
                continue
            endpoint = route.endpoint
            methods = normalize_methods(route.methods)
            key = (
                getattr(endpoint, "__func__", endpoint),
                id(getattr(endpoint, "__self__", None)),
                methods,
            )
            existing = merged.get(key)
            if existing is not None:
                if route.path not in existing.urls:
                    merged[key] = replace(existing, urls=existing.urls + (route.path,))
                continue
            owner, owner_name = resolve_owner(endpoint)
            merged[key] = HandlerDescriptor(
                urls=(route.path,),
                methods=methods,
                endpoint=endpoint,
                owner=owner,
                owner_name=owner_name,
                returns_body=returns_body(route),
                route=route,
            )
        return list(merged.values())
