"""
apidoc — Parameter Extraction
==============================

What:  Lists the request parameters a handler declares.
How:   FastAPI already analysed every endpoint signature into a `Dependant`
       tree. We walk it (sub-dependencies included, repeats dropped) through
       its public `*_params` lists and read each
       parameter's pydantic FieldInfo for type, default, description and
       examples.

Order of the result:
    path → query → header → cookie → body
    Within a location, declaration order is kept.

Body parameters that are pydantic models are expanded into their fields,
so `def create(user: UserCreate)` documents `name`, `email`, ... rather
than a single opaque `user` entry.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Set, Tuple, get_args

from fastapi.dependencies.models import Dependant
from fastapi.routing import APIRoute
from pydantic import BaseModel
from pydantic.fields import FieldInfo

from apidoc.registry import HandlerDescriptor
from apidoc.schemas.document import ParamDescriptor

logger = logging.getLogger(__name__)


def type_name(annotation: Any) -> str:
    """Readable type label: `int`, `str`, `List[int]`, `Optional[str]`."""
    if annotation is None:
        return "Any"
    if isinstance(annotation, type) and not get_args(annotation):
        return annotation.__name__
    return str(annotation).replace("typing.", "")


def _render(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def describe_field(name: str, info: FieldInfo, location: str) -> ParamDescriptor:
    """Builds a ParamDescriptor from a pydantic FieldInfo."""
    required = info.is_required()
    default = ""
    if not required and info.default_factory is None:
        default = _render(info.default)
    example = _render(info.examples[0]) if info.examples else ""
    return ParamDescriptor(
        name=info.alias or name,
        type=type_name(info.annotation),
        location=location,
        required=required,
        default=default,
        example=example,
        desc=info.description or "",
    )


class ParamExtractor(ABC):
    """Handler → parameter descriptors. Must be a pure function of the handler."""

    @abstractmethod
    def extract(self, handler: HandlerDescriptor) -> List[ParamDescriptor]:
        ...


class FastAPIParamExtractor(ParamExtractor):
    """Reads parameters from the APIRoute's flattened dependant."""

    LOCATIONS: Tuple[Tuple[str, str], ...] = (
        ("path", "path_params"),
        ("query", "query_params"),
        ("header", "header_params"),
        ("cookie", "cookie_params"),
        ("body", "body_params"),
    )

    @classmethod
    def flatten(cls, dependant: Dependant) -> Dict[str, List[Any]]:
        """
        Collects the fields of `dependant` and all its sub-dependencies.

        Returns:
            attribute name (e.g. "query_params") → fields, the endpoint's own
            first. A parameter declared by several dependencies is kept once.
        """
        flat: Dict[str, List[Any]] = {attribute: [] for _, attribute in cls.LOCATIONS}
        seen: Set[Tuple[str, str]] = set()
        stack = [dependant]
        while stack:
            current = stack.pop(0)
            for _, attribute in cls.LOCATIONS:
                for field in getattr(current, attribute, None) or ():
                    key = (attribute, getattr(field, "alias", None) or field.name)
                    if key in seen:
                        continue
                    seen.add(key)
                    flat[attribute].append(field)
            stack[:0] = list(current.dependencies or ())
        return flat

    def extract(self, handler: HandlerDescriptor) -> List[ParamDescriptor]:
        route: Optional[APIRoute] = handler.route if isinstance(handler.route, APIRoute) else None
        if route is None:
            return []

        flat = self.flatten(route.dependant)
        params: List[ParamDescriptor] = []
        for location, attribute in self.LOCATIONS:
            for field in flat[attribute]:
                annotation = field.field_info.annotation
                if (
                    location == "body"
                    and isinstance(annotation, type)
                    and issubclass(annotation, BaseModel)
                ):
                    for name, info in annotation.model_fields.items():
                        params.append(describe_field(name, info, location))
                    continue
                params.append(describe_field(field.name, field.field_info, location))

        logger.debug("Extracted %d params for %s", len(params), handler.qualified_name)
        return params
