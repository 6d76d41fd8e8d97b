"""
apidoc — Route Classifier
==========================

What:  Decides whether a handler is a documentable JSON API at all.
Who:   First step of every model build, before ignore rules are applied.
"""

from apidoc.metadata import MetadataProvider
from apidoc.registry import HandlerDescriptor


def is_json_api(handler: HandlerDescriptor, provider: MetadataProvider) -> bool:
    """
    True iff the handler returns a data body and is not marked hidden.

    A hidden marker on the handler overrides one on its owner, so
    `api_ignore(False)` on a method re-exposes it inside a hidden class.
    No marker at all means "not hidden".
    """
    if not handler.returns_body:
        return False
    return not provider.is_hidden(handler)
