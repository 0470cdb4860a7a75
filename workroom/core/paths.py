"""Canonical project and task paths derived from entity fields."""

from pathlib import Path
from typing import List, Optional

from .exceptions import ValidationError
from .models import Project, TaskTreeNode


def project_root(projects_dir: Path, name_sanitized: str) -> Path:
    return Path(projects_dir) / name_sanitized


def _root(project: Project) -> Path:
    if project.root is None:
        raise ValidationError(f"Project '{project.name}' has no root path")
    return project.root


def pipeline_path(project: Project) -> Path:
    return _root(project) / project.pipeline_dir_name


def work_path(project: Project) -> Path:
    """Return the root of the task tree of ``project``."""
    return _root(project) / project.work_dir_name


def dailies_path(project: Project) -> Path:
    return _root(project) / project.dailies_dir_name


def deliveries_path(project: Project) -> Path:
    return _root(project) / project.deliveries_dir_name


def extra_paths(project: Project) -> List[Path]:
    root = _root(project)
    return [root / name for name in project.extra_dir_names]


def project_dirs(project: Project) -> List[Path]:
    """Every top-level directory a new project is created with."""
    return [
        pipeline_path(project),
        work_path(project),
        dailies_path(project),
        deliveries_path(project),
    ] + extra_paths(project)


def task_work_path(task: TaskTreeNode, project: Project) -> Path:
    """Return the primary work subdirectory of ``task``, where workfiles live."""
    return task.path / project.primary_work_sub_dir


def task_output_path(task: TaskTreeNode, project: Project) -> Optional[Path]:
    if project.output_sub_dir is None:
        return None
    return task.path / project.output_sub_dir
