"""Interactive selection state on top of the discovery engine.

``Workspace`` owns what the user currently has selected: a project, its task
tree, a task and that task's workfiles. The engine functions never read this
state; the workspace passes explicit arguments to them and re-walks the
filesystem after every mutating command.

A failed refresh keeps the previous successful state. Only the level that
failed loses its selection: a failed task tree rebuild clears the tree, the
task and the file list, and leaves the project list alone.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from . import launcher
from .config import AppConfig
from .exceptions import (
    ConfigurationError, NoSelectionError, NotFoundError, ValidationError, WorkroomError
)
from .models import Client, Dcc, Project, TaskTreeNode, WorkFile
from .naming import sanitize_name
from .paths import dailies_path, deliveries_path, task_output_path, work_path
from .projects import create_project, filter_projects, find_projects
from .tasks import TaskTreeBuilder, create_group, create_task, make_task_predicate
from .templates import find_dccs
from .workfiles import create_file, list_workfiles, version_up


logger = logging.getLogger(__name__)


class Workspace:
    """Current project, task and file selection of one interactive user."""

    def __init__(self, config: AppConfig):
        self.config = config
        self.projects: List[Project] = []
        self.project_filter = ""
        self.dccs: List[Dcc] = []
        self.current_project: Optional[Project] = None
        self.task_tree: Optional[TaskTreeNode] = None
        self.current_task: Optional[TaskTreeNode] = None
        self.files: Optional[List[WorkFile]] = None
        self.last_error: Optional[WorkroomError] = None

    @property
    def projects_dir(self) -> Path:
        projects_dir = self.config.paths.resolved_projects_dir()
        if projects_dir is None:
            raise ConfigurationError("No projects directory configured (paths.projects_dir)")
        return projects_dir

    @property
    def templates_dir(self) -> Path:
        templates_dir = self.config.paths.resolved_templates_dir()
        if templates_dir is None:
            raise ConfigurationError("No templates directory configured (paths.templates_dir)")
        return templates_dir

    @property
    def filtered_projects(self) -> List[Project]:
        return filter_projects(self.projects, self.project_filter)

    def _fail(self, error: WorkroomError) -> None:
        self.last_error = error
        logger.error(str(error))

    def _require_project(self) -> Project:
        if self.current_project is None:
            raise NoSelectionError("No project selected")
        return self.current_project

    def _require_task(self) -> TaskTreeNode:
        if self.current_task is None:
            raise NoSelectionError("No task selected")
        return self.current_task

    def _clear_task_tree(self) -> None:
        self.task_tree = None
        self.current_task = None
        self.files = None

    def _refresh_after_write(self, refresh) -> None:
        # The write already happened; a failed rescan only lands in last_error
        try:
            refresh()
        except WorkroomError as e:
            logger.warning(f"Rescan after write failed: {e}")

    # Refreshing

    def refresh_dccs(self) -> List[Dcc]:
        """Rescan the templates directory. The previous list is kept on failure."""
        try:
            self.dccs = find_dccs(self.templates_dir)
        except WorkroomError as e:
            self._fail(e)
            raise
        return self.dccs

    def refresh_projects(self) -> List[Project]:
        """Rescan the projects directory. The previous list and selection are kept on failure."""
        try:
            projects = find_projects(
                self.projects_dir,
                self.config.layout.template_project(),
                legacy_layout=self.config.projects.legacy_layout,
            )
        except WorkroomError as e:
            self._fail(e)
            raise

        self.projects = projects
        if self.current_project is not None:
            self.current_project = self._lookup_project(self.current_project.name_sanitized)
            if self.current_project is None:
                self._clear_task_tree()
        return self.projects

    def refresh_tasks(self) -> TaskTreeNode:
        """Rebuild the task tree of the current project.

        On failure the tree, the task and the file list are cleared.
        """
        project = self._require_project()
        try:
            predicate = make_task_predicate(
                self.config.tasks.convention,
                self.config.tasks.marker_name,
                project.work_sub_dirs,
            )
            tree = TaskTreeBuilder(predicate).build(work_path(project))
        except WorkroomError as e:
            self._clear_task_tree()
            self._fail(e)
            raise

        self.task_tree = tree
        if self.current_task is not None:
            self.current_task = tree.find(self.current_task.path)
            if self.current_task is None or not self.current_task.is_task:
                self.current_task = None
                self.files = None
        return tree

    def refresh_files(self) -> List[WorkFile]:
        """List the workfiles of the current task. On failure the task is deselected."""
        project = self._require_project()
        task = self._require_task()
        try:
            files = list_workfiles(task, project, self.config.files.ignore_extensions)
        except WorkroomError as e:
            self.current_task = None
            self.files = None
            self._fail(e)
            raise

        self.files = files
        return files

    def refresh_all(self) -> List[WorkroomError]:
        """Refresh every level that has a selection and return the errors encountered."""
        self.last_error = None
        errors = []
        steps = [self.refresh_dccs, self.refresh_projects]
        if self.current_project is not None:
            steps.append(self.refresh_tasks)
        for step in steps:
            try:
                step()
            except WorkroomError as e:
                errors.append(e)

        if self.current_task is not None:
            try:
                self.refresh_files()
            except WorkroomError as e:
                errors.append(e)
        return errors

    # Selection

    def _lookup_project(self, name: str) -> Optional[Project]:
        for project in self.projects:
            if project.name_sanitized == name or project.name == name:
                return project
        return None

    def select_project(self, project: Union[Project, str]) -> TaskTreeNode:
        """Make a project current and build its task tree."""
        name = project.name_sanitized if isinstance(project, Project) else project
        found = self._lookup_project(name)
        if found is None:
            raise NotFoundError(f"No project named '{name}'")

        self.current_project = found
        self._clear_task_tree()
        return self.refresh_tasks()

    def resolve_node(self, path: Union[str, Path, None]) -> TaskTreeNode:
        """Find a tree node by absolute path or by path relative to the work root."""
        if self.task_tree is None:
            raise NoSelectionError("No task tree loaded")
        if path in (None, "", "."):
            return self.task_tree
        path = Path(path)
        if not path.is_absolute():
            path = self.task_tree.path / path
        node = self.task_tree.find(path)
        if node is None:
            raise NotFoundError(f"No task or group at '{path}'")
        return node

    def select_task(self, path: Union[str, Path]) -> List[WorkFile]:
        """Make a task current and list its workfiles."""
        node = self.resolve_node(path)
        if not node.is_task:
            raise ValidationError(f"'{node.name}' is a group, not a task")
        self.current_task = node
        self.files = None
        return self.refresh_files()

    def find_dcc(self, name: str) -> Dcc:
        for dcc in self.dccs:
            if dcc.name == name:
                return dcc
        raise NotFoundError(f"No template named '{name}'")

    # Commands

    def version_up(self, workfile: WorkFile) -> WorkFile:
        new_file = version_up(workfile, exclusive=self.config.files.exclusive_create)
        if self.current_task is not None:
            self._refresh_after_write(self.refresh_files)
        return new_file

    def create_file(self, logical_name: str, dcc: Union[Dcc, str]) -> Path:
        """Create a new workfile in the current task from a template."""
        project = self._require_project()
        task = self._require_task()
        if isinstance(dcc, str):
            dcc = self.find_dcc(dcc)

        path = create_file(
            sanitize_name(logical_name),
            task,
            project,
            dcc,
            exclusive=self.config.files.exclusive_create,
        )
        self._refresh_after_write(self.refresh_files)
        return path

    def _group_for(self, parent: Union[str, Path, None]) -> TaskTreeNode:
        node = self.resolve_node(parent)
        if node.is_task:
            raise ValidationError(f"Cannot create folders inside task '{node.name}'")
        return node

    def create_task(self, parent: Union[str, Path, None], name: str) -> Path:
        project = self._require_project()
        group = self._group_for(parent)
        path = create_task(group.path, name, project, self.config.tasks.marker_name)
        self._refresh_after_write(self.refresh_tasks)
        return path

    def create_group(self, parent: Union[str, Path, None], name: str) -> Path:
        self._require_project()
        group = self._group_for(parent)
        path = create_group(group.path, name)
        self._refresh_after_write(self.refresh_tasks)
        return path

    def create_project(self, name: str, client: Optional[Client] = None) -> Project:
        """Create a project from the configured layout, prefixed by a client short name."""
        if client is not None:
            name = f"{client.short_name}_{name}"
        project = Project.new(name, self.projects_dir, self.config.layout.template_project())
        create_project(project)
        self._refresh_after_write(self.refresh_projects)
        return self._lookup_project(project.name_sanitized) or project

    # Launcher

    def open_dailies(self) -> bool:
        return launcher.reveal_path(dailies_path(self._require_project()))

    def open_deliveries(self) -> bool:
        return launcher.reveal_path(deliveries_path(self._require_project()))

    def open_output(self) -> bool:
        output = task_output_path(self._require_task(), self._require_project())
        if output is None:
            raise ConfigurationError("The project has no output subdirectory")
        return launcher.reveal_path(output)

    def open_file(self, workfile: WorkFile) -> bool:
        return launcher.open_path(workfile.path)

    def reveal_file(self, workfile: WorkFile) -> bool:
        return launcher.reveal_path(workfile.path)
