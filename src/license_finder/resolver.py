"""
Records handed over by a dependency manager after it resolved a project.

The package-manager integration itself lives outside this package; it only
has to produce ResolvedPackage records in enumeration order.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from .dependency import Dependency


@dataclass(frozen=True)
class ResolvedPackage:
    """A package as reported by the dependency manager."""

    name: str
    version: str
    dependencies: Sequence[str] = field(default_factory=tuple)  # declared runtime deps
    groups: Sequence[str] = field(default_factory=tuple)
    homepage: Optional[str] = None
    license: Optional[str] = None

    def in_groups(self, groups: Optional[Iterable[str]]) -> bool:
        """Whether this package is active for the given groups."""
        if groups is None or not self.groups:
            return True
        wanted = set(groups)
        return any(group in wanted for group in self.groups)

    def to_dependency(self, source: str) -> Dependency:
        """Convert to an unapproved Dependency with no ancestry yet."""
        return Dependency(
            name=self.name,
            version=self.version,
            license=self.license,
            approved=False,
            source=source,
            homepage=self.homepage,
        )


def active_groups(all_groups: Iterable[str], ignored: Iterable[str] = ()) -> List[str]:
    """
    Ordered list of groups to resolve, without the ignored ones.

    Args:
        all_groups: Groups the project declares, in declaration order
        ignored: Groups the caller does not want tracked

    Returns:
        List of group names, duplicates removed
    """
    ignored_set = set(ignored)
    result: List[str] = []
    for group in all_groups:
        if group not in ignored_set and group not in result:
            result.append(group)
    return result


def select_packages(
    packages: Iterable[ResolvedPackage], groups: Optional[Iterable[str]] = None
) -> List[ResolvedPackage]:
    """Packages active for ``groups``, in the given order. None means all groups."""
    group_list = list(groups) if groups is not None else None
    return [package for package in packages if package.in_groups(group_list)]
