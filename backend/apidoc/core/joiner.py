"""
apidoc — Metadata Joiner
=========================

What:  Assembles the complete RouteDoc of one documentable handler.
How:   Pulls URLs/methods from the registry descriptor, parameters and return
       shape from the extraction services, and display metadata and response
       codes from the metadata provider, falling back to the copyright
       defaults where the handler declares nothing.

Fallbacks:
    responses                  explicit non-empty list, else copyright.global_response
    title/desc/develop/index   explicit MethodMeta, else "" / "" / False / 0
    comment_in_return_example  explicit MethodMeta value, else copyright default
"""

import hashlib
from typing import Callable

from apidoc.metadata import MetadataProvider
from apidoc.registry import HandlerDescriptor
from apidoc.schemas.document import DocumentCopyright, RouteDoc
from apidoc.services.params import ParamExtractor
from apidoc.services.returns import ReturnExtractor

ID_LENGTH = 16


def route_id(handler: HandlerDescriptor) -> str:
    """
    Deterministic id from methods and URLs; stable across restarts.

    Collisions between distinct handlers are resolved by the builder.
    """
    key = ",".join(handler.methods) + "|" + ",".join(handler.urls)
    return hashlib.md5(key.encode("utf-8")).hexdigest()[:ID_LENGTH]


class MetadataJoiner:
    """
    Builds RouteDocs for one build cycle.

    Args:
        copyright:         Defaults for responses and the comment flag
        provider:          Metadata lookups
        param_extractor:   Request parameter service
        return_extractor:  Response shape service
        example_url:       route id → absolute example URL
    """

    def __init__(
        self,
        copyright: DocumentCopyright,
        provider: MetadataProvider,
        param_extractor: ParamExtractor,
        return_extractor: ReturnExtractor,
        example_url: Callable[[str], str],
    ):
        self.copyright = copyright
        self.provider = provider
        self.param_extractor = param_extractor
        self.return_extractor = return_extractor
        self.example_url = example_url

    def join(self, handler: HandlerDescriptor, doc_id: str) -> RouteDoc:
        responses = self.provider.responses(handler) or self.copyright.global_response
        shape = self.return_extractor.extract(handler, self.copyright.return_record_level)

        title, desc, develop, index = "", "", False, 0
        comment = self.copyright.comment_in_return_example
        meta = self.provider.method(handler)
        if meta is not None:
            title, desc, develop, index = meta.title, meta.desc, meta.develop, meta.index
            if meta.comment_in_return_example is not None:
                comment = meta.comment_in_return_example

        return RouteDoc(
            id=doc_id,
            urls=tuple(handler.urls),
            methods=tuple(handler.methods),
            params=tuple(self.param_extractor.extract(handler)),
            responses=tuple(responses),
            return_fields=tuple(shape.fields),
            return_json=shape.example_json,
            title=title,
            desc=desc,
            develop=develop,
            index=index,
            comment_in_return_example=comment,
            example_url=self.example_url(doc_id),
        )
