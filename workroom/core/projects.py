"""Project discovery and project creation."""

import logging
import os
from pathlib import Path
from typing import List, Sequence

import yaml

from .exceptions import AlreadyExistsError, DescriptorError, ParseError, FileSystemError, ValidationError
from .error_handler import ErrorHandler, safe_path_operation
from .models import PROJECT_FILE_NAME, Project
from .paths import project_dirs


logger = logging.getLogger(__name__)
audit = logging.getLogger("workroom.audit")


@safe_path_operation
def read_project(path: Path) -> Project:
    """
    Load a project from its descriptor file.

    Args:
        path: Path of a ``project.yaml``

    Raises:
        DescriptorError: If the content is not a valid project descriptor
        FileSystemError: If the file cannot be read
    """
    path = Path(path)
    logger.info(f"Attempting to open project: {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise DescriptorError(f"Could not parse project descriptor {path}: {e}") from e
    return Project.from_descriptor(data, root=path.parent)


@safe_path_operation
def write_project(project: Project) -> Path:
    """Write the descriptor of ``project`` into its root folder."""
    if project.root is None:
        raise ValidationError(f"Project '{project.name}' has no root path")
    path = project.root / PROJECT_FILE_NAME
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(project.to_descriptor(), f, default_flow_style=False, sort_keys=False)
    return path


@safe_path_operation
def find_projects(projects_root: Path, template: Project, legacy_layout: bool = False) -> List[Project]:
    """
    Find the projects stored directly below ``projects_root``.

    A folder is a project when it holds a ``project.yaml``. With
    ``legacy_layout`` a folder is a project when it holds a directory named
    like the template's pipeline directory, and the project is built from the
    template. Unreadable or malformed descriptors are logged and skipped.

    Args:
        projects_root: Folder holding one folder per project
        template: Layout used for legacy projects
        legacy_layout: Use the pipeline-directory convention

    Returns:
        Projects sorted by their natural order

    Raises:
        FileSystemError: If ``projects_root`` cannot be listed
    """
    projects_root = Path(projects_root)
    projects = []
    skipped = []

    with os.scandir(projects_root) as entries:
        for entry in entries:
            if not entry.is_dir():
                continue
            item = Path(entry.path)

            if legacy_layout:
                if (item / template.pipeline_dir_name).is_dir():
                    projects.append(Project.new(item.name, projects_root, template).with_root(item))
                continue

            descriptor = item / PROJECT_FILE_NAME
            if not descriptor.is_file():
                continue
            try:
                projects.append(read_project(descriptor))
            except (ParseError, FileSystemError) as e:
                logger.error(f"Could not open project: {e}")
                skipped.append(e)

    if skipped:
        ErrorHandler(logger).log_error_summary(skipped, "project discovery")

    projects.sort()
    logger.info(f"Found {len(projects)} projects in {projects_root}")
    return projects


@safe_path_operation
def create_project(project: Project) -> Path:
    """
    Create a project folder, its top-level directories and its descriptor.

    A failure partway leaves the folders created so far in place.

    Returns:
        The project root

    Raises:
        AlreadyExistsError: If the project folder already exists
        ValidationError: If the project name sanitizes to nothing
    """
    if not project.name_sanitized:
        raise ValidationError(f"'{project.name}' does not contain any usable characters")
    if project.root is None:
        raise ValidationError(f"Project '{project.name}' has no root path")
    if project.root.exists():
        raise AlreadyExistsError(f"Project already exists: {project.root}", project.root)

    project.root.mkdir()
    for path in project_dirs(project):
        path.mkdir()
    write_project(project)

    audit.info(f"create project {project.root}")
    return project.root


def filter_projects(projects: Sequence[Project], text: str) -> List[Project]:
    """Return the projects whose display name contains ``text``, ignoring case."""
    if not text:
        return list(projects)
    needle = text.lower()
    return [p for p in projects if needle in p.name.lower()]
