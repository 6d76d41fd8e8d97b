"""
apidoc — Ignore Rules
======================

What:  Decides whether a handler is excluded from documentation by the
       configured ignore rules.
How:   Rules are parsed once into `IgnoreRule`s; `IgnoreMatcher.matches()`
       ORs them over the handler's URLs and methods.

Rule syntax:
    /users              literal: any URL of the handler equals "/users"
    users               same as above; a leading "/" is added
    /internal/*         wildcard: "*" matches any substring (full-match regex)
    /users|post         method-paired: "/users" AND the handler exposes POST
    /admin/*|DELETE     wildcard + method

    A rule is split on "|" only when that yields exactly two parts;
    otherwise the whole rule is the pattern.

    "/error" is always ignored.

Malformed wildcard rules (e.g. "/a(*") cannot be compiled. They are logged
once and never match, so the affected routes stay documented.
"""

import logging
import re
from dataclasses import dataclass
from typing import Collection, Iterable, List, Optional, Pattern

logger = logging.getLogger(__name__)

BUILTIN_IGNORE_URLS = frozenset({"/error"})

WILDCARD = "*"
METHOD_SEPARATOR = "|"


@dataclass(frozen=True)
class IgnoreRule:
    """One parsed rule. `regex` is set for wildcard rules, `method` for paired ones."""
    source: str
    pattern: str
    method: Optional[str] = None
    regex: Optional[Pattern[str]] = None
    wildcard: bool = False

    def matches_url(self, url: str) -> bool:
        if self.wildcard:
            # A wildcard rule that failed to compile has no regex and never matches
            return self.regex is not None and self.regex.fullmatch(url) is not None
        return url == self.pattern

    def matches(self, urls: Collection[str], methods: Collection[str]) -> bool:
        if self.method is not None and self.method not in methods:
            return False
        return any(self.matches_url(url) for url in urls)


def parse_rule(source: str) -> IgnoreRule:
    """Normalizes and compiles one rule string."""
    rule = source if source.startswith("/") else "/" + source
    wildcard = WILDCARD in rule
    if wildcard:
        rule = rule.replace(WILDCARD, "(.*)?")

    method = None
    parts = rule.split(METHOD_SEPARATOR)
    if len(parts) == 2:
        rule, method = parts[0], parts[1].upper()

    regex = None
    if wildcard:
        try:
            regex = re.compile(rule)
        except re.error as e:
            logger.warning("Ignoring malformed ignore rule %r: %s", source, e)
    return IgnoreRule(source=source, pattern=rule, method=method, regex=regex, wildcard=wildcard)


class IgnoreMatcher:
    """
    Ignore rules of one documentation build.

    Usage:
        matcher = IgnoreMatcher({"/internal/*", "/users|post"})
        matcher.matches(("/users",), ("GET", "POST"))   # True
    """

    def __init__(self, rules: Optional[Iterable[str]] = None):
        sources = set(rules or ()) | BUILTIN_IGNORE_URLS
        # Sorted for deterministic evaluation and log output
        self.rules: List[IgnoreRule] = [parse_rule(s) for s in sorted(sources) if s]

    def matches(self, urls: Iterable[str], methods: Iterable[str]) -> bool:
        """True if any rule excludes a handler with these URLs and methods."""
        url_list = list(urls)
        method_set = {m.upper() for m in methods}
        return any(rule.matches(url_list, method_set) for rule in self.rules)
