# Routes package init
"""
apidoc — API Routes Package
============================

Route Inventory:
    - docs.py:    GET  /api/version            (copyright summary + counts)
                  GET  /api/info               (modules and routes)
                  GET  /api/example/{id}.json  (canned example body)
                  POST /api/refresh            (rebuild the model)
    - health.py:  GET  /health                 (service health check)

Routes are thin: they read the DocumentModelCache from app.state and
shape responses. Both modules' handlers are marked `api_ignore`, so the
documentation never lists itself.
"""
