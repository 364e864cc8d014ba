"""
Ordered collection of tracked dependencies.

A list is built once per run, either from a dependency manager's resolution
or from the snapshot persisted by the previous run. Merging the persisted
list with the fresh one yields the list to persist next.
"""

from html import escape
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

import yaml

from .config import get_config
from .dependency import Dependency
from .error_handling import ErrorCategory, raise_data_error
from .resolver import ResolvedPackage, select_packages
from .structured_logging import (
    log_dependency_added,
    log_dependency_removed,
    log_list_built,
    log_merge_complete,
)

_HTML_STYLE = """\
body { font-family: sans-serif; margin: 2em; }
.dependency { border-bottom: 1px solid #ddd; padding: 0.5em 0; }
.unapproved h2 { color: #c62828; }
.approved h2 { color: #2e7d32; }
dt { font-weight: bold; }"""


class DependencyList:
    """Ordered dependency records; names are unique once merged."""

    def __init__(self, dependencies: Optional[Iterable[Dependency]] = None):
        self.dependencies: List[Dependency] = list(dependencies or [])

    @classmethod
    def from_resolution(
        cls,
        packages: Iterable[ResolvedPackage],
        groups: Optional[Sequence[str]] = None,
        source: Optional[str] = None,
    ) -> "DependencyList":
        """
        Build a list from a dependency manager's resolved packages.

        Args:
            packages: Resolved packages in enumeration order
            groups: Active groups; None keeps every package
            source: Provenance marker, defaults to the configured managed source

        Returns:
            DependencyList: Unapproved dependencies with parent links set
        """
        source = source if source is not None else get_config().tracking.managed_source
        active = select_packages(packages, groups)

        dependencies = [package.to_dependency(source) for package in active]
        by_name: Dict[str, Dependency] = {}
        for dependency in dependencies:
            by_name.setdefault(dependency.name, dependency)

        for package, parent in zip(active, dependencies):
            for child_name in package.dependencies:
                child = by_name.get(child_name)
                # Declared but unresolved names are the resolver's concern
                if child is not None:
                    child.add_parent(parent)

        log_list_built("resolution", len(dependencies), source=source)
        return cls(dependencies)

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "DependencyList":
        """Build a list from decoded snapshot records, preserving their order."""
        dependencies = [Dependency.from_dict(record) for record in records]
        log_list_built("snapshot", len(dependencies))
        return cls(dependencies)

    @classmethod
    def from_yaml(cls, text: str) -> "DependencyList":
        """
        Build a list from the YAML snapshot written by ``to_yaml``.

        Raises:
            DependencyDataError: If the text is not a YAML list of mappings
        """
        try:
            records = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise_data_error(
                f"Dependency snapshot is not valid YAML: {e}",
                "dependency_list",
                "from_yaml",
                category=ErrorCategory.SERIALIZATION,
                exception=e,
            )

        if records is None:
            records = []
        if not isinstance(records, list):
            raise_data_error(
                f"Dependency snapshot must be a list, got {type(records).__name__}",
                "dependency_list",
                "from_yaml",
                category=ErrorCategory.SERIALIZATION,
            )

        return cls.from_records(records)

    def as_records(self) -> List[Dict[str, Any]]:
        """Structured form of the list, one mapping per dependency in list order."""
        return [dependency.to_dict() for dependency in self.dependencies]

    def to_yaml(self) -> str:
        return yaml.safe_dump(
            self.as_records(),
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
        )

    def merge(self, current: "DependencyList") -> "DependencyList":
        """
        Reconcile this (persisted) list with a freshly resolved one.

        Entries of ``current`` come first in its order; same-named entries of
        this list are updated in place so their approval record survives.
        Entries missing from ``current`` are kept only when they were not
        produced by the managed resolver.

        Args:
            current: The freshly resolved list; its entries are not modified

        Returns:
            DependencyList: The list to persist
        """
        managed_source = get_config().tracking.managed_source

        old_by_name: Dict[str, Dependency] = {}
        for dependency in self.dependencies:
            old_by_name.setdefault(dependency.name, dependency)

        merged: List[Dependency] = []
        merged_by_name: Dict[str, Dependency] = {}
        fresh_parents: Dict[str, List[Dependency]] = {}
        added = 0

        for fresh in current.dependencies:
            existing = merged_by_name.get(fresh.name)
            if existing is not None:
                existing.merge(fresh)
            elif fresh.name in old_by_name:
                existing = old_by_name[fresh.name].merge(fresh)
                merged.append(existing)
                merged_by_name[fresh.name] = existing
            else:
                existing = fresh.copy()
                merged.append(existing)
                merged_by_name[fresh.name] = existing
                added += 1
                log_dependency_added(fresh.name, fresh.version)
            fresh_parents.setdefault(fresh.name, []).extend(fresh.parents)

        # Ancestry comes from the fresh resolution, re-pointed at merged members
        for name, parents in fresh_parents.items():
            dependency = merged_by_name[name]
            dependency.parents = []
            for parent in parents:
                if parent.name in merged_by_name:
                    dependency.add_parent(merged_by_name[parent.name])

        removed = retained = 0
        for stale in self.dependencies:
            if stale.name in merged_by_name:
                continue
            if stale.source == managed_source:
                removed += 1
                log_dependency_removed(stale.name, stale.source)
                continue
            stale.parents = [
                merged_by_name[parent.name]
                for parent in stale.parents
                if parent.name in merged_by_name
            ]
            merged.append(stale)
            merged_by_name[stale.name] = stale
            retained += 1

        log_merge_complete(len(merged), added, removed, retained)
        return DependencyList(merged)

    def find(self, name: str) -> Optional[Dependency]:
        """First dependency with exactly this name, or None."""
        return next((d for d in self.dependencies if d.name == name), None)

    def names(self) -> List[str]:
        return [dependency.name for dependency in self.dependencies]

    def unapproved(self) -> List[Dependency]:
        return [dependency for dependency in self.dependencies if not dependency.approved]

    def action_items(self) -> str:
        """Renderings of every unapproved dependency, one per line."""
        return "\n".join(str(dependency) for dependency in self.unapproved())

    def to_s(self) -> str:
        return "\n".join(str(dependency) for dependency in self.dependencies)

    def __str__(self) -> str:
        return self.to_s()

    def to_html(self) -> str:
        """Full HTML document containing every dependency's fragment."""
        title = escape(get_config().rendering.html_title)
        total = len(self.dependencies)
        pending = len(self.unapproved())
        fragments = "\n".join(dependency.to_html() for dependency in self.dependencies)

        return f"""\
<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
{_HTML_STYLE}
</style>
</head>
<body>
<h1>{title}</h1>
<p class="summary">{total} dependencies, {pending} unapproved</p>
{fragments}
</body>
</html>
"""

    def __iter__(self) -> Iterator[Dependency]:
        return iter(self.dependencies)

    def __len__(self) -> int:
        return len(self.dependencies)

    def __repr__(self) -> str:
        return f"DependencyList({self.names()!r})"
