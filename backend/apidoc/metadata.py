"""
apidoc — Route Metadata
========================

What:  Explicit, typed metadata a host app attaches to its handlers:
       hidden flag, module grouping, title/description/order, response codes.
How:   Decorators store a `RouteMeta` under the `__apidoc__` attribute of a
       function, a class (applies to all its handler methods) or a module
       (applies to all handlers defined in it). A `MetadataProvider` reads
       it back when the model is built.
Who:   Decorators are used by route modules; the provider is used by
       apidoc.core.

Usage:
    router = APIRouter(prefix="/users")

    @router.get("/{user_id}", response_model=User)
    @api_group("Users", index=1)
    @api_method(title="Get user", desc="Look a user up by id")
    @api_responses((404, "no such user"))
    def get_user(user_id: int) -> User:
        ...

    # Module-wide: hide every handler of this module
    __apidoc__ = RouteMeta(hidden=True)

Lookup precedence (mirrors a method-level annotation shadowing a
class-level one):
    hidden / group / responses   method → owner → framework fallback
    method (title etc.)          method → framework fallback
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional, Tuple, TypeVar, Union

from fastapi.routing import APIRoute

from apidoc.registry import HandlerDescriptor
from apidoc.schemas.document import ResponseCode

META_ATTRIBUTE = "__apidoc__"

T = TypeVar("T")


@dataclass(frozen=True)
class GroupMeta:
    """Explicit module membership: one or more module names and an order index."""
    names: Tuple[str, ...]
    index: int = 0


@dataclass(frozen=True)
class MethodMeta:
    """
    Per-handler display metadata.

    `comment_in_return_example=None` defers to the copyright default.
    """
    title: str = ""
    desc: str = ""
    develop: bool = False
    index: int = 0
    comment_in_return_example: Optional[bool] = None


@dataclass(frozen=True)
class RouteMeta:
    """Everything a handler (or its owner) may declare. Unset parts are None/empty."""
    hidden: Optional[bool] = None
    group: Optional[GroupMeta] = None
    method: Optional[MethodMeta] = None
    responses: Tuple[ResponseCode, ...] = ()


# ══════════════════════════════════════════════════════════════════════════
# Decorators
# ══════════════════════════════════════════════════════════════════════════


def get_meta(target: Any) -> Optional[RouteMeta]:
    """Returns the RouteMeta declared directly on `target` (not inherited from a base class)."""
    if target is None:
        return None
    # Class attribute lookup would also find a base class's marker
    if isinstance(target, type):
        meta = target.__dict__.get(META_ATTRIBUTE)
    else:
        meta = getattr(target, META_ATTRIBUTE, None)
    return meta if isinstance(meta, RouteMeta) else None


def _update(target: T, **changes: Any) -> T:
    # Bound methods forward attribute writes nowhere; store on the function
    holder = getattr(target, "__func__", target)
    current = get_meta(holder) or RouteMeta()
    setattr(holder, META_ATTRIBUTE, replace(current, **changes))
    return target


def api_ignore(value: bool = True) -> Callable[[T], T]:
    """Marks a handler (or every handler of a class/module) as hidden from documentation."""
    def decorator(target: T) -> T:
        return _update(target, hidden=value)
    return decorator


def api_group(*names: str, index: int = 0) -> Callable[[T], T]:
    """Places the handler(s) into the named module(s). Blank names are skipped at build time."""
    def decorator(target: T) -> T:
        return _update(target, group=GroupMeta(names=tuple(names), index=index))
    return decorator


def api_method(
    title: str = "",
    desc: str = "",
    develop: bool = False,
    index: int = 0,
    comment_in_return_example: Optional[bool] = None,
) -> Callable[[T], T]:
    """Declares title, description, development flag and in-module order of a handler."""
    meta = MethodMeta(
        title=title,
        desc=desc,
        develop=develop,
        index=index,
        comment_in_return_example=comment_in_return_example,
    )

    def decorator(target: T) -> T:
        return _update(target, method=meta)
    return decorator


def api_responses(*responses: Union[ResponseCode, Tuple[int, str]]) -> Callable[[T], T]:
    """Declares the response-code catalog of a handler, e.g. `api_responses((404, "missing"))`."""
    catalog = tuple(
        r if isinstance(r, ResponseCode) else ResponseCode(code=r[0], msg=r[1])
        for r in responses
    )

    def decorator(target: T) -> T:
        return _update(target, responses=catalog)
    return decorator


# ══════════════════════════════════════════════════════════════════════════
# Providers
# ══════════════════════════════════════════════════════════════════════════


class MetadataProvider(ABC):
    """
    Capability lookups the model builder needs for one handler.

    Implementations:
        - AttributeMetadataProvider: reads `__apidoc__` markers with FastAPI
          route attributes as fallback (default)
        - Test doubles: return canned values per handler
    """

    @abstractmethod
    def is_hidden(self, handler: HandlerDescriptor) -> bool:
        """True when the handler or its owner is marked hidden (method level wins)."""
        ...

    @abstractmethod
    def group(self, handler: HandlerDescriptor) -> Optional[GroupMeta]:
        """Explicit module membership, or None for the derived default module."""
        ...

    @abstractmethod
    def method(self, handler: HandlerDescriptor) -> Optional[MethodMeta]:
        """Explicit display metadata, or None."""
        ...

    @abstractmethod
    def responses(self, handler: HandlerDescriptor) -> Tuple[ResponseCode, ...]:
        """Explicit response codes; empty means "use the global catalog"."""
        ...


class AttributeMetadataProvider(MetadataProvider):
    """Reads decorator markers from handler and owner, then FastAPI route attributes."""

    def _method_meta(self, handler: HandlerDescriptor) -> Optional[RouteMeta]:
        return get_meta(handler.endpoint) or get_meta(getattr(handler.endpoint, "__func__", None))

    def _owner_meta(self, handler: HandlerDescriptor) -> Optional[RouteMeta]:
        return get_meta(handler.owner)

    @staticmethod
    def _api_route(handler: HandlerDescriptor) -> Optional[APIRoute]:
        return handler.route if isinstance(handler.route, APIRoute) else None

    def is_hidden(self, handler: HandlerDescriptor) -> bool:
        for meta in (self._method_meta(handler), self._owner_meta(handler)):
            if meta is not None and meta.hidden is not None:
                return meta.hidden
        return False

    def group(self, handler: HandlerDescriptor) -> Optional[GroupMeta]:
        for meta in (self._method_meta(handler), self._owner_meta(handler)):
            if meta is not None and meta.group is not None:
                return meta.group
        route = self._api_route(handler)
        if route is not None and route.tags:
            return GroupMeta(names=tuple(str(tag) for tag in route.tags))
        return None

    def method(self, handler: HandlerDescriptor) -> Optional[MethodMeta]:
        meta = self._method_meta(handler)
        if meta is not None and meta.method is not None:
            return meta.method
        route = self._api_route(handler)
        if route is not None and (route.summary or route.description):
            return MethodMeta(title=route.summary or "", desc=route.description or "")
        return None

    def responses(self, handler: HandlerDescriptor) -> Tuple[ResponseCode, ...]:
        for meta in (self._method_meta(handler), self._owner_meta(handler)):
            if meta is not None and meta.responses:
                return meta.responses
        route = self._api_route(handler)
        if route is not None and route.responses:
            catalog = []
            for code, spec in route.responses.items():
                # Keys may be ints, numeric strings or ranges like "5XX"
                try:
                    numeric = int(code)
                except (TypeError, ValueError):
                    continue
                description = spec.get("description", "") if isinstance(spec, dict) else ""
                catalog.append(ResponseCode(code=numeric, msg=description))
            return tuple(catalog)
        return ()
