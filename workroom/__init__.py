"""Workroom - organize production projects, task trees and versioned workfiles."""

__version__ = "0.1.0"
__author__ = "Workroom Team"
__description__ = "Organize production projects, task trees and versioned workfiles"

# Import main components for programmatic access
from .core.models import Project, TaskTreeNode, WorkFile, Dcc
from .core.workfiles import decode, encode
from .core.tasks import TaskTreeBuilder
from .core.session import Workspace
from .cli.main import cli

__all__ = [
    "Project",
    "TaskTreeNode",
    "WorkFile",
    "Dcc",
    "decode",
    "encode",
    "TaskTreeBuilder",
    "Workspace",
    "cli"
]
