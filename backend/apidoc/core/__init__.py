# Core package init
"""
apidoc — Documentation Model Core
==================================

What:  Turns registered handlers into the published documentation model.

Pipeline (run once per build by DocumentModelCache):
    handler ─▶ classifier ─▶ ignore ─▶ joiner ─▶ grouping ─▶ freeze
                 (JSON?)     (rules)   (RouteDoc)  (modules)   (sort, publish)

Modules:
    - classifier.py: is this handler a documentable JSON endpoint?
    - ignore.py:     configured ignore rules (literal, wildcard, method-paired)
    - joiner.py:     assembles one RouteDoc from metadata and extractors
    - grouping.py:   module assignment and index tie-breaks
    - urls.py:       example URL construction
    - cache.py:      lazy, lock-guarded, build-once model cache
"""
