"""
apidoc — Documentation Model Cache
===================================

What:  Owns the documentation model: builds it on first read, publishes it
       as an immutable snapshot and serves it to every later reader.
Who:   One instance per application, stored on `app.state.document_cache`
       and read by the documentation routes.

State Machine:
    EMPTY ──get()──▶ BUILDING ──success──▶ READY
      ▲                 │                    │
      └────failure──────┘                    │
      └────────────invalidate()──────────────┘

Concurrency (double-checked locking):
    1. Fast path: read the snapshot reference without a lock; if set, return it
    2. Slow path: take the lock, check again (another thread may have just
       built it), build if still empty, publish, release
    The documentation routes are sync handlers running on Starlette's
    threadpool and share one `threading.Lock`. The build runs at most once
    under contention; reads after publish never lock.

Disabled mode:
    With no copyright block, or `copyright.online=True`, `get()` returns
    None and nothing is ever built.

Failure handling:
    - registry enumeration fails → DocumentBuildError, cache stays EMPTY
    - one handler fails to classify/extract → WARNING, handler skipped
"""

import logging
import threading
import time
from enum import Enum
from types import MappingProxyType
from typing import Dict, Optional

from apidoc.core.classifier import is_json_api
from apidoc.core.grouping import DEFAULT_SUFFIX, GroupingEngine, ModuleAccumulator
from apidoc.core.ignore import IgnoreMatcher
from apidoc.core.joiner import MetadataJoiner, route_id
from apidoc.core.urls import PLACEHOLDER, build_example_url
from apidoc.exceptions import ConfigurationError, DocumentBuildError
from apidoc.metadata import AttributeMetadataProvider, MetadataProvider
from apidoc.registry import RouteRegistry
from apidoc.schemas.document import DocumentCopyright, DocumentedModel, RouteDoc
from apidoc.services.params import FastAPIParamExtractor, ParamExtractor
from apidoc.services.returns import ReturnExtractor, SchemaReturnExtractor

logger = logging.getLogger(__name__)


class CacheState(str, Enum):
    EMPTY = "empty"
    BUILDING = "building"
    READY = "ready"


class DocumentModelCache:
    """
    Lazily built, build-once documentation model.

    Args:
        registry:          Source of handlers, enumerated at build time
        copyright:         Documentation settings; None disables documentation
        provider:          Metadata lookups (default: decorator markers + FastAPI attributes)
        param_extractor:   Request parameter service (default: FastAPI dependant)
        return_extractor:  Response shape service (default: pydantic JSON schema)
        api_prefix:        Prefix of the documentation routes, used in example URLs
        example_path:      Example route template with one `{...}` placeholder
        domain:            Public base URL; empty means "use the requesting URL"
        group_suffix:      Token stripped from owner names for default module names

    Raises:
        ConfigurationError: `example_path` has no placeholder.
    """

    def __init__(
        self,
        registry: RouteRegistry,
        copyright: Optional[DocumentCopyright],
        provider: Optional[MetadataProvider] = None,
        param_extractor: Optional[ParamExtractor] = None,
        return_extractor: Optional[ReturnExtractor] = None,
        api_prefix: str = "/api",
        example_path: str = "/example/{id}.json",
        domain: str = "",
        group_suffix: str = DEFAULT_SUFFIX,
    ):
        if PLACEHOLDER.search(example_path) is None:
            raise ConfigurationError(
                message=f"Example path '{example_path}' has no route id placeholder",
                setting="example_path",
            )

        self.registry = registry
        self.copyright = copyright
        self.provider = provider or AttributeMetadataProvider()
        self.param_extractor = param_extractor or FastAPIParamExtractor()
        self.return_extractor = return_extractor or SchemaReturnExtractor()
        self.api_prefix = api_prefix
        self.example_path = example_path
        self.domain = domain
        self.group_suffix = group_suffix

        self._lock = threading.Lock()
        self._snapshot: Optional[DocumentedModel] = None
        self._state = CacheState.EMPTY
        self.build_count = 0

    # ── Public API ────────────────────────────────────────────────────────

    @property
    def enabled(self) -> bool:
        return self.copyright is not None and not self.copyright.online

    @property
    def state(self) -> CacheState:
        return self._state

    def get(self, request_domain: str = "") -> Optional[DocumentedModel]:
        """
        Returns the published model, building it first if necessary.

        Args:
            request_domain: Base URL of the current request; only used for
                example URLs when no domain is configured, and only by the
                request that performs the build.

        Raises:
            DocumentBuildError: The registry could not be enumerated.
        """
        if not self.enabled:
            return None

        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot

        with self._lock:
            if self._snapshot is None:
                self._state = CacheState.BUILDING
                try:
                    model = self.build(request_domain)
                except Exception:
                    self._state = CacheState.EMPTY
                    raise
                self._snapshot = model
                self._state = CacheState.READY
                self.build_count += 1
            return self._snapshot

    def find_route(self, doc_id: str, request_domain: str = "") -> Optional[RouteDoc]:
        """Looks a route up by id. None when disabled or unknown."""
        model = self.get(request_domain)
        if model is None:
            return None
        return model.find(doc_id)

    def invalidate(self) -> None:
        """Drops the published model; the next read rebuilds it from the registry."""
        with self._lock:
            self._snapshot = None
            self._state = CacheState.EMPTY
        logger.info("Documentation model invalidated")

    def refresh(self, request_domain: str = "") -> Optional[DocumentedModel]:
        """Invalidates and rebuilds immediately."""
        self.invalidate()
        return self.get(request_domain)

    # ── Build ─────────────────────────────────────────────────────────────

    def build(self, request_domain: str = "") -> DocumentedModel:
        """
        Runs one full, sequential pass over the registry.

        Not synchronized by itself; `get()` calls it under the lock.
        """
        copyright = self.copyright
        if copyright is None:
            return DocumentedModel()

        started = time.perf_counter()
        domain = self.domain or request_domain

        def example_url(doc_id: str) -> str:
            return build_example_url(domain, self.api_prefix, self.example_path, doc_id)

        matcher = IgnoreMatcher(copyright.ignore_url_set)
        joiner = MetadataJoiner(
            copyright=copyright,
            provider=self.provider,
            param_extractor=self.param_extractor,
            return_extractor=self.return_extractor,
            example_url=example_url,
        )
        grouping = GroupingEngine(self.group_suffix)
        modules = ModuleAccumulator()
        routes_by_id: Dict[str, RouteDoc] = {}

        try:
            handlers = self.registry.handlers()
        except Exception as e:
            logger.error("Route enumeration failed: %s", str(e), exc_info=True)
            raise DocumentBuildError(context={"original_error": type(e).__name__}) from e

        skipped = 0
        for handler in handlers:
            try:
                if not is_json_api(handler, self.provider):
                    continue
                if matcher.matches(handler.urls, handler.methods):
                    logger.debug("Ignored by rule: %s %s", handler.methods, handler.urls)
                    continue
                doc_id = self._unique_id(route_id(handler), routes_by_id)
                doc = joiner.join(handler, doc_id)
                group = self.provider.group(handler)
            except Exception as e:
                skipped += 1
                logger.warning(
                    "Skipping undocumentable handler %s: %s",
                    handler.qualified_name,
                    str(e),
                    exc_info=True,
                )
                continue
            routes_by_id[doc_id] = doc
            grouping.assign(modules, doc, group, handler.owner_name)

        model = DocumentedModel(
            modules=modules.freeze(),
            routes_by_id=MappingProxyType(routes_by_id),
        )
        logger.info(
            "Documentation model built: %d modules, %d routes, %d skipped in %.1fms",
            model.group_count,
            len(routes_by_id),
            skipped,
            (time.perf_counter() - started) * 1000,
        )
        return model

    @staticmethod
    def _unique_id(candidate: str, taken: Dict[str, RouteDoc]) -> str:
        if candidate not in taken:
            return candidate
        suffix = 2
        while f"{candidate}-{suffix}" in taken:
            suffix += 1
        logger.warning("Route id collision on %s; using suffix -%d", candidate, suffix)
        return f"{candidate}-{suffix}"
