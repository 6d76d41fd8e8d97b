"""
apidoc — Documentation Route Handlers
======================================

What:  Read-only JSON endpoints exposing the documentation model.
How:   Each handler asks the app's DocumentModelCache for the model (which
       builds it on first use) and shapes the response. `create_router()`
       mounts them under the configured prefix and example path.
Who:   Called by documentation front-ends and by developers fetching
       canned example responses.

Endpoints (prefix default /api):
    GET  /version              copyright summary + group/api counts
    GET  /info                 ordered list of modules
    GET  /example/{id}.json    canned example body of one route
    POST /refresh              drop and rebuild the model

Disabled mode (no copyright block, or doc_online=true):
    /version → null, /info → [], /example → empty body, /refresh → null.

Handlers are plain `def` so FastAPI runs them on its threadpool; the model
build is synchronous and guarded by a threading lock.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Request, Response

from apidoc.core.cache import DocumentModelCache
from apidoc.core.urls import PLACEHOLDER, example_route_path, normalize_prefix
from apidoc.exceptions import NotFoundError
from apidoc.metadata import api_ignore
from apidoc.schemas.document import (
    DocumentCopyright,
    DocumentedModel,
    ErrorResponse,
    ModuleDoc,
    VersionInfo,
)

logger = logging.getLogger(__name__)


def get_document_cache(request: Request) -> DocumentModelCache:
    """Dependency: the cache installed by `install_documentation`."""
    return request.app.state.document_cache


def version_info(copyright: DocumentCopyright, model: DocumentedModel) -> VersionInfo:
    return VersionInfo(
        title=copyright.title,
        team=copyright.team,
        version=copyright.version,
        copyright=copyright.copyright,
        comment_in_return_example=copyright.comment_in_return_example,
        return_record_level=copyright.return_record_level,
        global_response=copyright.global_response,
        group_count=model.group_count,
        api_count=model.api_count,
    )


@api_ignore()
def version(
    request: Request,
    cache: DocumentModelCache = Depends(get_document_cache),
) -> Optional[VersionInfo]:
    model = cache.get(str(request.base_url))
    if model is None:
        return None
    return version_info(cache.copyright, model)


@api_ignore()
def info(
    request: Request,
    cache: DocumentModelCache = Depends(get_document_cache),
) -> List[ModuleDoc]:
    model = cache.get(str(request.base_url))
    if model is None:
        return []
    return list(model.modules)


@api_ignore()
def example(
    id: str,
    request: Request,
    cache: DocumentModelCache = Depends(get_document_cache),
) -> Response:
    """
    Returns the example body exactly as rendered at build time.

    Raises:
        NotFoundError: `id` is not a documented route.
    """
    if not cache.enabled:
        return Response(content="", media_type="application/json")
    doc = cache.find_route(id, str(request.base_url))
    if doc is None:
        raise NotFoundError(resource="route", resource_id=id)
    return Response(content=doc.return_json, media_type="application/json")


@api_ignore()
def refresh(
    request: Request,
    cache: DocumentModelCache = Depends(get_document_cache),
) -> Optional[VersionInfo]:
    if not cache.enabled:
        return None
    model = cache.refresh(str(request.base_url))
    logger.info("Documentation refreshed: %d modules", model.group_count)
    return version_info(cache.copyright, model)


def create_router(prefix: str = "/api", example_path: str = "/example/{id}.json") -> APIRouter:
    """
    Router with the documentation endpoints.

    Args:
        prefix:        Mount point, e.g. "/api"
        example_path:  Example route template, with or without the prefix;
                       its single placeholder may have any name and is
                       served as `{id}`
    """
    router = APIRouter(prefix=normalize_prefix(prefix), tags=["Documentation"])
    router.add_api_route(
        "/version",
        version,
        methods=["GET"],
        response_model=Optional[VersionInfo],
        summary="Documentation version and counts",
    )
    router.add_api_route(
        "/info",
        info,
        methods=["GET"],
        response_model=List[ModuleDoc],
        summary="All documented modules and routes",
    )
    router.add_api_route(
        PLACEHOLDER.sub("{id}", example_route_path(prefix, example_path), count=1),
        example,
        methods=["GET"],
        response_class=Response,
        responses={
            200: {"description": "Example response body", "content": {"application/json": {}}},
            404: {"description": "Unknown route id", "model": ErrorResponse},
        },
        summary="Canned example response of one route",
    )
    router.add_api_route(
        "/refresh",
        refresh,
        methods=["POST"],
        response_model=Optional[VersionInfo],
        summary="Rebuild the documentation model",
    )
    return router
