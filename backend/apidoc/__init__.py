"""
apidoc — Route Documentation Package
=====================================

What: Introspects a FastAPI application's registered routes and serves a
      browsable documentation model (modules → endpoints → params, responses,
      return fields, example payloads).
Who:  Installed into a host app via `apidoc.main.install_documentation`, or
      served standalone with `uvicorn apidoc.main:app`.

Architecture Note:

    ┌─────────────────────────────────────┐
    │        Routes (API Layer)           │  ← /api/version, /api/info, /api/example
    ├─────────────────────────────────────┤
    │   Core (classify → ignore → join    │  ← model building + lazy cache
    │         → group → freeze)           │
    ├─────────────────────────────────────┤
    │  Registry / Metadata / Extractors   │  ← what the host app declares
    ├─────────────────────────────────────┤
    │        Schemas (Data)               │  ← frozen pydantic records
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
