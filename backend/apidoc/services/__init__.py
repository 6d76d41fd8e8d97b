# Services package init
"""
apidoc — Extraction Services
=============================

What:  Per-handler extraction of request parameters and response shapes.
How:   Each service is an abstract interface plus a FastAPI/pydantic
       implementation. The model builder only sees the interfaces, so a
       host can plug in its own extractors.

Service Inventory:
    - ParamExtractor (abstract) / FastAPIParamExtractor:
        handler → list of ParamDescriptor
    - ReturnExtractor (abstract) / SchemaReturnExtractor:
        handler + record-level flag → return fields and example JSON
"""
