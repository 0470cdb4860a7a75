"""Task tree discovery and task/group creation."""

import logging
import os
from pathlib import Path
from typing import Sequence

import yaml

from .exceptions import AlreadyExistsError, ConfigurationError, ValidationError
from .error_handler import safe_path_operation
from .models import Project, TaskTreeNode
from .naming import sanitize_name


logger = logging.getLogger(__name__)
audit = logging.getLogger("workroom.audit")

TASK_FILE_NAME = "task.yaml"

MARKER_CONVENTION = "marker"
SUBDIRS_CONVENTION = "subdirs"
CONVENTIONS = (MARKER_CONVENTION, SUBDIRS_CONVENTION)


class TaskPredicate:
    """Decides whether a directory is a task."""

    convention = ""

    def is_task(self, path: Path) -> bool:
        raise NotImplementedError


class MarkerFilePredicate(TaskPredicate):
    """A directory is a task when it holds the task marker file."""

    convention = MARKER_CONVENTION

    def __init__(self, marker_name: str = TASK_FILE_NAME):
        self.marker_name = marker_name

    def is_task(self, path: Path) -> bool:
        return (Path(path) / self.marker_name).is_file()


class SubdirPairPredicate(TaskPredicate):
    """A directory is a task when it holds both the work and output subdirectories.

    Unrelated folders that happen to contain the same names are misclassified,
    so this is only used when configured explicitly.
    """

    convention = SUBDIRS_CONVENTION

    def __init__(self, work_dir_name: str = "01_work", output_dir_name: str = "02_output"):
        self.work_dir_name = work_dir_name
        self.output_dir_name = output_dir_name

    def is_task(self, path: Path) -> bool:
        path = Path(path)
        return (path / self.work_dir_name).is_dir() and (path / self.output_dir_name).is_dir()


def make_task_predicate(
    convention: str = MARKER_CONVENTION,
    marker_name: str = TASK_FILE_NAME,
    work_sub_dirs: Sequence[str] = (),
) -> TaskPredicate:
    """
    Create the task predicate for a configured convention.

    Args:
        convention: ``marker`` (default) or ``subdirs``
        marker_name: Marker filename for the ``marker`` convention
        work_sub_dirs: The project's work subdirectories; the first two are
            the pair checked by the ``subdirs`` convention

    Raises:
        ConfigurationError: For unknown conventions or too few subdirectories
    """
    if convention == MARKER_CONVENTION:
        return MarkerFilePredicate(marker_name)
    if convention == SUBDIRS_CONVENTION:
        if len(work_sub_dirs) < 2:
            raise ConfigurationError(
                "The subdirs task convention needs at least two work subdirectories"
            )
        return SubdirPairPredicate(work_sub_dirs[0], work_sub_dirs[1])
    raise ConfigurationError(
        f"Unknown task convention '{convention}', expected one of {', '.join(CONVENTIONS)}"
    )


class TaskTreeBuilder:
    """Walks a work directory into a tree of tasks and groups."""

    def __init__(self, predicate: TaskPredicate = None):
        self.predicate = predicate or MarkerFilePredicate()

    @safe_path_operation
    def build(self, root: Path) -> TaskTreeNode:
        """
        Build the task tree rooted at ``root``.

        A task is returned as a leaf without looking at its contents. Groups
        are walked in directory enumeration order, which is not sorted. Any
        unreadable directory aborts the whole build.

        Args:
            root: Directory to classify

        Returns:
            The root node of the tree

        Raises:
            FileSystemError: If any directory in the subtree cannot be read
        """
        root = Path(root)
        if self.predicate.is_task(root):
            return TaskTreeNode(name=root.name, path=root, is_task=True)

        children = []
        with os.scandir(root) as entries:
            for entry in entries:
                if not entry.is_dir():
                    continue
                children.append(self.build(Path(entry.path)))

        return TaskTreeNode(name=root.name, path=root, is_task=False, children=tuple(children))


def _new_dir_name(name: str) -> str:
    sanitized = sanitize_name(name)
    if not sanitized:
        raise ValidationError(f"'{name}' does not contain any usable characters")
    return sanitized


@safe_path_operation
def create_group(parent: Path, name: str) -> Path:
    """
    Create a group folder below ``parent``.

    Returns:
        Path of the new folder

    Raises:
        AlreadyExistsError: If the folder exists
        ValidationError: If the name sanitizes to nothing
    """
    path = Path(parent) / _new_dir_name(name)
    if path.exists():
        raise AlreadyExistsError(f"Folder already exists: {path}", path)
    path.mkdir()
    audit.info(f"create group {path}")
    return path


@safe_path_operation
def create_task(
    parent: Path,
    name: str,
    project: Project,
    marker_name: str = TASK_FILE_NAME,
) -> Path:
    """
    Create a task folder with the project's work subdirectories and marker file.

    A failure partway leaves the folders created so far in place.

    Returns:
        Path of the new task folder

    Raises:
        AlreadyExistsError: If the folder exists
        ValidationError: If the name sanitizes to nothing
    """
    task_name = _new_dir_name(name)
    path = Path(parent) / task_name
    if path.exists():
        raise AlreadyExistsError(f"Task already exists: {path}", path)

    path.mkdir()
    for sub_dir in project.work_sub_dirs:
        (path / sub_dir).mkdir()

    with open(path / marker_name, "w", encoding="utf-8") as f:
        yaml.safe_dump({"name": task_name, "is_task": True}, f, default_flow_style=False)

    audit.info(f"create task {path}")
    return path
