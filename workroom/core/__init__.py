"""Core engine for project discovery, task trees and versioned workfiles."""

from .models import Project, TaskTreeNode, WorkFile, Dcc, Client
from .naming import sanitize_name
from .workfiles import decode, encode, list_workfiles, version_up, create_file
from .tasks import TaskTreeBuilder, MarkerFilePredicate, SubdirPairPredicate, make_task_predicate
from .projects import find_projects, create_project, read_project
from .templates import find_dccs
from .session import Workspace

__all__ = [
    "Project",
    "TaskTreeNode",
    "WorkFile",
    "Dcc",
    "Client",
    "sanitize_name",
    "decode",
    "encode",
    "list_workfiles",
    "version_up",
    "create_file",
    "TaskTreeBuilder",
    "MarkerFilePredicate",
    "SubdirPairPredicate",
    "make_task_predicate",
    "find_projects",
    "create_project",
    "read_project",
    "find_dccs",
    "Workspace",
]
