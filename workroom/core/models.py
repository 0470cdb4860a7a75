"""Core data models for the Workroom production file organizer."""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from .exceptions import DescriptorError
from .naming import sanitize_name


PROJECT_FILE_NAME = "project.yaml"

_PROJECT_STRING_FIELDS = (
    "name",
    "name_sanitized",
    "pipeline_dir_name",
    "work_dir_name",
    "dailies_dir_name",
    "deliveries_dir_name",
)
_PROJECT_LIST_FIELDS = ("extra_dir_names", "work_sub_dirs")


@dataclass(frozen=True, order=True)
class Project:
    """A production project as described by its ``project.yaml``."""
    name: str
    name_sanitized: str
    pipeline_dir_name: str
    work_dir_name: str
    dailies_dir_name: str
    deliveries_dir_name: str
    extra_dir_names: Tuple[str, ...] = ()
    work_sub_dirs: Tuple[str, ...] = ()
    root: Optional[Path] = field(default=None, compare=False)

    @classmethod
    def new(cls, name: str, projects_dir: Path, template: "Project") -> "Project":
        """Create a project record from a display name and a template layout.

        Nothing is written to disk.
        """
        name_sanitized = sanitize_name(name)
        return cls(
            name=name,
            name_sanitized=name_sanitized,
            pipeline_dir_name=template.pipeline_dir_name,
            work_dir_name=template.work_dir_name,
            dailies_dir_name=template.dailies_dir_name,
            deliveries_dir_name=template.deliveries_dir_name,
            extra_dir_names=tuple(template.extra_dir_names),
            work_sub_dirs=tuple(template.work_sub_dirs),
            root=Path(projects_dir) / name_sanitized,
        )

    @property
    def primary_work_sub_dir(self) -> str:
        """The work subdirectory scanned for workfiles."""
        return self.work_sub_dirs[0] if self.work_sub_dirs else ""

    @property
    def output_sub_dir(self) -> Optional[str]:
        return self.work_sub_dirs[1] if len(self.work_sub_dirs) > 1 else None

    def with_root(self, root: Path) -> "Project":
        return replace(self, root=Path(root))

    def to_descriptor(self) -> Dict[str, Any]:
        """Return the mapping stored in ``project.yaml``."""
        data: Dict[str, Any] = {key: getattr(self, key) for key in _PROJECT_STRING_FIELDS}
        for key in _PROJECT_LIST_FIELDS:
            data[key] = list(getattr(self, key))
        return data

    @classmethod
    def from_descriptor(cls, data: Any, root: Optional[Path] = None) -> "Project":
        """Build a project from a deserialized descriptor mapping."""
        if not isinstance(data, Mapping):
            raise DescriptorError("Project descriptor must be a mapping")

        values: Dict[str, Any] = {}
        for key in _PROJECT_STRING_FIELDS:
            value = data.get(key)
            if not isinstance(value, str):
                raise DescriptorError(f"Project descriptor field '{key}' must be a string")
            values[key] = value
        for key in _PROJECT_LIST_FIELDS:
            value = data.get(key, [])
            if value is None:
                value = []
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise DescriptorError(f"Project descriptor field '{key}' must be a list of strings")
            values[key] = tuple(value)

        return cls(root=Path(root) if root is not None else None, **values)

    def to_dict(self) -> Dict[str, Any]:
        data = self.to_descriptor()
        data["root"] = str(self.root) if self.root is not None else None
        return data


@dataclass(frozen=True)
class TaskTreeNode:
    """A task or group directory and, for groups, its children."""
    name: str
    path: Path
    is_task: bool = False
    children: Tuple["TaskTreeNode", ...] = ()

    def walk(self) -> Iterator["TaskTreeNode"]:
        """Yield this node and all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def tasks(self) -> Iterator["TaskTreeNode"]:
        return (node for node in self.walk() if node.is_task)

    def find(self, path: Path) -> Optional["TaskTreeNode"]:
        """Return the node located at ``path``, if it is part of this tree."""
        path = Path(path)
        for node in self.walk():
            if node.path == path:
                return node
        return None

    def to_dict(self, root: Optional[Path] = None) -> Dict[str, Any]:
        relative = self.path.relative_to(root).as_posix() if root is not None else str(self.path)
        return {
            "name": self.name,
            "path": relative,
            "is_task": self.is_task,
            "children": [child.to_dict(root) for child in self.children],
        }


@dataclass(frozen=True, order=True)
class WorkFile:
    """A versioned workfile, ordered by name, extension and version."""
    name: str
    extension: str
    version: int
    path: Path = field(compare=False)

    def fmt_version(self) -> str:
        """Return the version in its presentable ``v###`` form."""
        return f"v{self.version:03d}"

    @property
    def filename(self) -> str:
        # Import here to avoid circular imports
        from .workfiles import encode
        return encode(self.name, self.version, self.extension)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "path": str(self.path),
            "extension": self.extension,
            "version": self.version,
            "label": self.fmt_version(),
        }


@dataclass(frozen=True, order=True)
class Dcc:
    """Template metadata used to create new workfiles for one application."""
    name: str
    extension: str
    template_path: Path

    def __post_init__(self):
        if self.extension and not self.extension.startswith("."):
            object.__setattr__(self, "extension", f".{self.extension}")
        object.__setattr__(self, "template_path", Path(self.template_path))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "extension": self.extension,
            "template_path": str(self.template_path),
        }


@dataclass(frozen=True)
class Client:
    """A client offered when naming new projects."""
    name: str
    short_name: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "short_name": self.short_name}
