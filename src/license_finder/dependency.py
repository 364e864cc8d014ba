"""
A single tracked third-party package and its license approval state.
"""

from dataclasses import dataclass, field, replace
from html import escape
from typing import Any, Dict, List, Mapping, Optional

from .config import get_config
from .error_handling import ErrorCategory, raise_data_error
from .structured_logging import log_approval_reset

# Key order of a persisted record
FIELD_ORDER = (
    "name",
    "version",
    "license",
    "approved",
    "source",
    "homepage",
    "license_url",
    "notes",
    "license_files",
    "readme_files",
)

# Fields a fresh resolution may overwrite during a merge
_RESOLVED_FIELDS = (
    "version",
    "source",
    "homepage",
    "license_url",
    "license_files",
    "readme_files",
)


@dataclass
class Dependency:
    """One third-party package tracked across runs."""

    name: str
    version: Optional[str] = None
    license: Optional[str] = None
    approved: bool = False
    source: Optional[str] = None
    homepage: Optional[str] = None
    license_url: Optional[str] = None
    notes: Optional[str] = None
    license_files: Optional[List[Any]] = None
    readme_files: Optional[List[Any]] = None
    # Dependencies that declared this one; owned by the enclosing list
    parents: List["Dependency"] = field(default_factory=list, compare=False, repr=False)

    @classmethod
    def from_dict(cls, attributes: Mapping[str, Any]) -> "Dependency":
        """
        Build a dependency from a raw field mapping.

        Args:
            attributes: Mapping of field name to value, e.g. a decoded snapshot record

        Returns:
            Dependency: The new record, with absent optional fields set to None

        Raises:
            DependencyDataError: If the mapping has no name
        """
        if not isinstance(attributes, Mapping):
            raise_data_error(
                f"Dependency record must be a mapping, got {type(attributes).__name__}",
                "dependency",
                "from_dict",
            )

        name = attributes.get("name")
        if name is None or name == "":
            raise_data_error(
                "Dependency record has no name",
                "dependency",
                "from_dict",
                details={"keys": sorted(str(key) for key in attributes)},
            )

        values = {key: attributes.get(key) for key in FIELD_ORDER}
        values["name"] = str(name)
        if values["approved"] is None:
            values["approved"] = False
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Return the persisted form of this record, keys in FIELD_ORDER."""
        return {key: getattr(self, key) for key in FIELD_ORDER}

    def copy(self) -> "Dependency":
        """Detached copy: own file lists, no parents."""
        return replace(
            self,
            license_files=_copy_list(self.license_files),
            readme_files=_copy_list(self.readme_files),
            parents=[],
        )

    def add_parent(self, parent: "Dependency") -> None:
        """Record that ``parent`` declares this dependency, once per parent."""
        if not any(existing is parent for existing in self.parents):
            self.parents.append(parent)

    def merge(self, other: "Dependency") -> "Dependency":
        """
        Update this record in place from a fresher resolution of the same package.

        Approval state and notes stay with this record. A license change on a
        previously known license revokes approval and drops a license URL the
        fresh side does not replace.

        Args:
            other: The freshly resolved dependency with the same name

        Returns:
            Dependency: self, updated

        Raises:
            DependencyDataError: If the names differ
        """
        if other.name != self.name:
            raise_data_error(
                f"Cannot merge dependencies with different names. "
                f"Expected {self.name}, was {other.name}.",
                "dependency",
                "merge",
                category=ErrorCategory.MERGE,
            )

        tracking = get_config().tracking

        for key in _RESOLVED_FIELDS:
            value = getattr(other, key)
            if value is not None:
                setattr(self, key, list(value) if isinstance(value, list) else value)

        if other.notes is not None and self.notes is None:
            self.notes = other.notes

        new_license = other.license
        if new_license is not None and new_license != tracking.unknown_license:
            if self.license is not None and new_license != self.license:
                if tracking.reset_approval_on_license_change and self.approved:
                    self.approved = False
                    log_approval_reset(self.name, self.license, new_license)
                if other.license_url is None:
                    # The URL described the previous license
                    self.license_url = None
            self.license = new_license

        return self

    def to_s(self) -> str:
        """Human-readable rendering used in summaries and action items."""
        line = f"{self.name} {self.version or ''}".rstrip()
        line += f", {self.license or 'unknown'}"
        if self.homepage:
            line += f", {self.homepage}"

        lines = [line]
        if self.license_files:
            lines.append("  license files:")
            lines.extend(f"    {_file_label(item)}" for item in self.license_files)
        if self.readme_files:
            lines.append("  readme files:")
            lines.extend(f"    {_file_label(item)}" for item in self.readme_files)
        if self.parents and get_config().rendering.show_parents_in_text:
            lines.append(
                "  required by: " + ", ".join(parent.name for parent in self.parents)
            )

        return "\n".join(lines)

    def __str__(self) -> str:
        return self.to_s()

    def to_html(self) -> str:
        """Render this dependency as an embeddable HTML fragment."""
        status = "approved" if self.approved else "unapproved"
        license_text = escape(self.license or "unknown")
        if self.license_url:
            license_text = f'<a href="{escape(self.license_url)}">{license_text}</a>'

        rows = [f"<dt>License</dt><dd>{license_text}</dd>"]
        if self.homepage:
            homepage = escape(self.homepage)
            rows.append(f'<dt>Homepage</dt><dd><a href="{homepage}">{homepage}</a></dd>')
        if self.source:
            rows.append(f"<dt>Source</dt><dd>{escape(self.source)}</dd>")
        if self.notes:
            rows.append(f"<dt>Notes</dt><dd>{escape(self.notes)}</dd>")

        heading = escape(self.name)
        if self.version:
            heading += f" {escape(self.version)}"

        parts = [
            f'<div id="{escape(self.name)}" class="dependency {status}">',
            f"  <h2>{heading}</h2>",
            "  <dl>",
        ]
        parts.extend(f"    {row}" for row in rows)
        parts.append("  </dl>")
        if self.parents:
            parts.append("  <h3>Required by</h3>")
            parts.append("  <ul>")
            parts.extend(
                f"    <li>{escape(parent.name)}</li>" for parent in self.parents
            )
            parts.append("  </ul>")
        parts.append("</div>")
        return "\n".join(parts)


def _copy_list(items: Optional[List[Any]]) -> Optional[List[Any]]:
    return list(items) if items is not None else None


def _file_label(item: Any) -> str:
    if isinstance(item, Mapping):
        return str(item.get("path") or item.get("file_name") or item)
    return str(item)

