"""
apidoc — Example URLs
======================

What:  Builds the absolute URL that returns a route's canned example body,
       and the path the example route is mounted at.
How:   Both go through `example_route_path()`, so the published URL and the
       mounted route always agree.

Example:
    build_example_url("http://host/", "/api", "/example/{id}.json", "abc123")
    → "http://host/api/example/abc123.json"

    A template that already carries the prefix ("/api/example/{id}.json")
    or lacks the leading slash ("example/{id}.json") gives the same URL.
"""

import re

PLACEHOLDER = re.compile(r"\{.*?\}")


def _leading_slash(path: str) -> str:
    if not path:
        return ""
    return path if path.startswith("/") else "/" + path


def normalize_prefix(prefix: str) -> str:
    """"api/" → "/api"; "" and "/" → ""."""
    return _leading_slash(prefix.strip().rstrip("/"))


def example_route_path(prefix: str, template: str) -> str:
    """
    The example template relative to the API prefix, with a leading slash.

        example_route_path("/api", "/api/example/{id}.json") → "/example/{id}.json"
        example_route_path("/api", "example/{id}.json")      → "/example/{id}.json"
    """
    prefix = normalize_prefix(prefix)
    path = _leading_slash(template.strip())
    if prefix and path.startswith(prefix + "/"):
        path = path[len(prefix):]
    return path


def build_example_url(domain: str, prefix: str, template: str, route_id: str) -> str:
    """
    Joins domain, API prefix and example path, then puts the id in.

    - one trailing "/" is stripped from the domain
    - only the first `{...}` placeholder is replaced
    """
    if domain.endswith("/"):
        domain = domain[:-1]
    path = normalize_prefix(prefix) + example_route_path(prefix, template)
    # Callable replacement: ids are inserted verbatim, no backslash escapes
    return domain + PLACEHOLDER.sub(lambda _: route_id, path, count=1)
