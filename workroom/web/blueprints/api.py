"""API blueprint for REST endpoints."""

from functools import wraps
from pathlib import Path

from flask import Blueprint, request, jsonify, current_app
from ...core.session import Workspace
from ...core.workfiles import decode
from ...core.exceptions import (
    FileSystemError, ValidationError, PermissionDeniedError, PathNotFoundError,
    AlreadyExistsError, TemplateMissingError, ParseError, SelectionError,
    NoSelectionError, ConfigurationError, WorkroomError
)

api_bp = Blueprint('api', __name__)


def get_workspace() -> Workspace:
    return current_app.extensions['workroom']


def holds_workspace_lock(func):
    """Run a route with the shared workspace locked for the whole request."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        with current_app.extensions['workroom_lock']:
            return func(*args, **kwargs)

    return wrapper


def validate_request_data(data, required_fields):
    """
    Validate request data contains required fields.

    Args:
        data: Request data dictionary
        required_fields: List of required field names

    Raises:
        ValidationError: If validation fails
    """
    if not data:
        raise ValidationError("Request body is required")

    missing_fields = [field for field in required_fields if field not in data]
    if missing_fields:
        raise ValidationError(f"Missing required fields: {', '.join(missing_fields)}")


def handle_api_error(error, operation="operation"):
    """
    Handle API errors and return appropriate JSON response.

    Args:
        error: The exception that occurred
        operation: Description of the operation that failed

    Returns:
        Tuple of (response, status_code)
    """
    current_app.logger.error(f"API error in {operation}: {error}")

    if isinstance(error, ValidationError):
        body, status = {'error': 'Validation error', 'message': str(error)}, 400
    elif isinstance(error, ParseError):
        body, status = {'error': 'Parse error', 'message': str(error)}, 400
    elif isinstance(error, NoSelectionError):
        body, status = {'error': 'No selection', 'message': str(error)}, 409
    elif isinstance(error, (PathNotFoundError, SelectionError)):
        body, status = {'error': 'Not found', 'message': str(error)}, 404
    elif isinstance(error, AlreadyExistsError):
        body, status = {'error': 'Already exists', 'message': str(error)}, 409
    elif isinstance(error, PermissionDeniedError):
        body, status = {'error': 'Permission denied', 'message': str(error)}, 403
    elif isinstance(error, TemplateMissingError):
        body, status = {'error': 'Template missing', 'message': str(error)}, 422
    elif isinstance(error, FileSystemError):
        body, status = {'error': 'File system error', 'message': str(error)}, 400
    elif isinstance(error, ConfigurationError):
        body, status = {'error': 'Configuration error', 'message': str(error)}, 503
    else:
        body, status = {'error': 'Application error', 'message': str(error)}, 400
    return jsonify(body), status


def _open_project(workspace: Workspace, name: str):
    """Select a project, rescanning the projects directory first."""
    workspace.refresh_projects()
    workspace.select_project(name)
    return workspace.current_project


def _tree_payload(workspace: Workspace):
    tree = workspace.task_tree
    return {
        'project': workspace.current_project.to_dict(),
        'tree': tree.to_dict(tree.path) if tree is not None else None,
    }


@api_bp.route('/projects', methods=['GET'])
@holds_workspace_lock
def get_projects():
    """
    List projects.

    Query parameters:
    - filter: Only include projects whose name contains this text
    """
    workspace = get_workspace()
    stale = False
    try:
        workspace.refresh_projects()
    except WorkroomError as e:
        stale = True
        # A failed refresh still serves the last good list
        if not workspace.projects:
            return handle_api_error(e, "project discovery")
        current_app.logger.warning(f"Serving previous project list: {e}")

    workspace.project_filter = request.args.get('filter', '').strip()
    projects = workspace.filtered_projects
    return jsonify({
        'projects': [p.to_dict() for p in projects],
        'count': len(projects),
        'stale': stale,
    })


@api_bp.route('/projects', methods=['POST'])
@holds_workspace_lock
def post_project():
    """Create a project. Body: ``{"name": ...}``."""
    workspace = get_workspace()
    try:
        data = request.get_json(silent=True)
        validate_request_data(data, ['name'])
        project = workspace.create_project(str(data['name']))
    except WorkroomError as e:
        return handle_api_error(e, "project creation")
    return jsonify({'project': project.to_dict()}), 201


@api_bp.route('/projects/<name>/tasks', methods=['GET'])
@holds_workspace_lock
def get_tasks(name):
    """Return the task tree of a project."""
    workspace = get_workspace()
    try:
        _open_project(workspace, name)
    except WorkroomError as e:
        return handle_api_error(e, "task tree")
    return jsonify(_tree_payload(workspace))


@api_bp.route('/projects/<name>/tasks', methods=['POST'])
@holds_workspace_lock
def post_task(name):
    """
    Create a task or group.

    Body: ``{"name": ..., "parent": "<path relative to work folder>", "kind": "task"|"group"}``
    """
    workspace = get_workspace()
    try:
        data = request.get_json(silent=True)
        validate_request_data(data, ['name'])
        kind = data.get('kind', 'task')
        if kind not in ('task', 'group'):
            raise ValidationError(f"Invalid kind: {kind}. Valid kinds: task, group")

        _open_project(workspace, name)
        if kind == 'task':
            path = workspace.create_task(data.get('parent', ''), str(data['name']))
        else:
            path = workspace.create_group(data.get('parent', ''), str(data['name']))
    except WorkroomError as e:
        return handle_api_error(e, "task creation")

    payload = _tree_payload(workspace)
    payload['created'] = str(path)
    return jsonify(payload), 201


@api_bp.route('/projects/<name>/files', methods=['GET'])
@holds_workspace_lock
def get_files(name):
    """
    List the workfiles of a task, latest first.

    Query parameters:
    - task: Task path relative to the work folder
    """
    workspace = get_workspace()
    try:
        task = request.args.get('task', '').strip()
        if not task:
            raise ValidationError("Query parameter 'task' is required")
        _open_project(workspace, name)
        files = workspace.select_task(task)
    except WorkroomError as e:
        return handle_api_error(e, "file listing")

    return jsonify({
        'task': str(workspace.current_task.path),
        'files': [f.to_dict() for f in files],
        'count': len(files),
    })


@api_bp.route('/projects/<name>/files', methods=['POST'])
@holds_workspace_lock
def post_file(name):
    """
    Create a workfile from a template.

    Body: ``{"task": ..., "dcc": ..., "name": "<optional>"}``
    """
    workspace = get_workspace()
    try:
        data = request.get_json(silent=True)
        validate_request_data(data, ['task', 'dcc'])
        workspace.refresh_dccs()
        _open_project(workspace, name)
        workspace.select_task(data['task'])
        path = workspace.create_file(str(data.get('name', '')), str(data['dcc']))
    except WorkroomError as e:
        return handle_api_error(e, "file creation")

    return jsonify({
        'created': str(path),
        'files': [f.to_dict() for f in workspace.files or []],
    }), 201


@api_bp.route('/files/version-up', methods=['POST'])
@holds_workspace_lock
def post_version_up():
    """Copy a workfile to its next version. Body: ``{"path": ...}``."""
    workspace = get_workspace()
    try:
        data = request.get_json(silent=True)
        validate_request_data(data, ['path'])
        path = Path(str(data['path']))
        if not path.is_absolute():
            raise ValidationError(f"Workfile path must be absolute: {path}")
        new_file = workspace.version_up(decode(path))
    except WorkroomError as e:
        return handle_api_error(e, "version up")

    return jsonify({'file': new_file.to_dict()}), 201


@api_bp.route('/dccs', methods=['GET'])
@holds_workspace_lock
def get_dccs():
    """List the workfile templates."""
    workspace = get_workspace()
    try:
        dccs = workspace.refresh_dccs()
    except WorkroomError as e:
        return handle_api_error(e, "template discovery")
    return jsonify({'dccs': [d.to_dict() for d in dccs], 'count': len(dccs)})
