"""
apidoc — Module Grouping
=========================

What:  Assigns documented routes to named modules and settles module order.
How:   `ModuleAccumulator` collects routes per module name while the build
       walks the registry; `freeze()` sorts and returns immutable ModuleDocs.

Rules:
    - No explicit group: one module named after the owner, "<stripped>-<owner>",
      e.g. UserController → "User-UserController", index 0.
    - Explicit group: the route goes to every non-blank name listed, all with
      the declared index (fan-out; a route may appear in several modules).
    - Module index: the first contribution sets it; later contributions lower
      it when they declare a smaller non-zero index. Zero never overrides.
    - Sorting: modules by index, routes within a module by RouteDoc.index.
      Python's sort is stable, so ties keep discovery order.
"""

from typing import Dict, List, Optional, Tuple

from apidoc.metadata import GroupMeta
from apidoc.schemas.document import ModuleDoc, RouteDoc

DEFAULT_SUFFIX = "Controller"


def default_group_name(simple_name: str, suffix: str = DEFAULT_SUFFIX) -> str:
    """
    Derives a module name from the owner's simple name.

    The name is cut at the first occurrence of `suffix`:
        default_group_name("UserController")     → "User-UserController"
        default_group_name("notes")              → "notes-notes"
    """
    stripped = simple_name
    if suffix and suffix in simple_name:
        stripped = simple_name[: simple_name.index(suffix)]
    return f"{stripped}-{simple_name}"


class _Module:
    __slots__ = ("name", "index", "routes")

    def __init__(self, name: str, index: int):
        self.name = name
        self.index = index
        self.routes: List[RouteDoc] = []


class ModuleAccumulator:
    """Mutable, build-local collection of modules in first-seen order."""

    def __init__(self):
        self._modules: Dict[str, _Module] = {}

    def add(self, name: str, index: int, route: RouteDoc) -> None:
        module = self._modules.get(name)
        if module is None:
            module = _Module(name, index)
            self._modules[name] = module
        elif index != 0 and index < module.index:
            module.index = index
        module.routes.append(route)

    def index_of(self, name: str) -> Optional[int]:
        module = self._modules.get(name)
        return module.index if module is not None else None

    def __len__(self) -> int:
        return len(self._modules)

    def freeze(self) -> Tuple[ModuleDoc, ...]:
        """Sorts routes and modules by index (stable) and returns frozen ModuleDocs."""
        frozen = [
            ModuleDoc(
                name=module.name,
                index=module.index,
                routes=tuple(sorted(module.routes, key=lambda r: r.index)),
            )
            for module in self._modules.values()
        ]
        return tuple(sorted(frozen, key=lambda m: m.index))


class GroupingEngine:
    """Places one RouteDoc into the accumulator according to its group metadata."""

    def __init__(self, suffix: str = DEFAULT_SUFFIX):
        self.suffix = suffix

    def assign(
        self,
        accumulator: ModuleAccumulator,
        route: RouteDoc,
        group: Optional[GroupMeta],
        owner_name: str,
    ) -> List[str]:
        """
        Adds `route` to its module(s).

        Returns:
            The module names the route was added to. An explicit group whose
            names are all blank adds the route nowhere.
        """
        if group is None:
            name = default_group_name(owner_name, self.suffix)
            accumulator.add(name, 0, route)
            return [name]

        names = []
        for name in group.names:
            if name and name.strip():
                accumulator.add(name, group.index, route)
                names.append(name)
        return names
