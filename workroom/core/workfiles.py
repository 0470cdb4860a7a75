"""Versioned workfile naming, listing, versioning and creation.

Workfiles follow a single naming contract shared with any external tooling::

    {name}_v{three digit version}.{extension}

``decode`` and ``encode`` convert between that contract and ``WorkFile``
records. ``version_up`` and ``create_file`` are the only operations that write
workfiles; both refuse to overwrite an existing file.

Both writers check for the destination and then copy, which leaves a window
in which another process can create the same file. Passing ``exclusive=True``
opens the destination with ``O_EXCL`` instead, so a collision is detected by
the create call itself.
"""

import logging
import os
import re
import shutil
from pathlib import Path
from typing import Iterable, List, Union

from .exceptions import (
    AlreadyExistsError, TemplateMissingError, NotVersionedError, InvalidVersionError
)
from .error_handler import safe_path_operation
from .models import Dcc, Project, TaskTreeNode, WorkFile
from .paths import task_work_path


logger = logging.getLogger(__name__)
audit = logging.getLogger("workroom.audit")

VERSION_SUFFIX_LENGTH = 5
MAX_VERSION = 999
FIRST_VERSION = 1

_VERSION_SUFFIX = re.compile(r"_v([0-9]{3})")


def decode(path: Union[str, Path]) -> WorkFile:
    """
    Parse a workfile path into a ``WorkFile``.

    Args:
        path: Path or filename of the workfile

    Returns:
        The decoded workfile record

    Raises:
        NotVersionedError: If the stem does not end in ``_v###``
    """
    path = Path(path)
    extension = path.suffix[1:]
    stem = path.stem

    # A stem shorter than the suffix cannot carry a version.
    if len(stem) < VERSION_SUFFIX_LENGTH:
        raise NotVersionedError(f"Not a versioned filename: {path.name}")

    offset = len(stem) - VERSION_SUFFIX_LENGTH
    match = _VERSION_SUFFIX.fullmatch(stem[offset:])
    if match is None:
        raise NotVersionedError(f"Not a versioned filename: {path.name}")

    return WorkFile(
        name=stem[:offset],
        extension=extension,
        version=int(match.group(1)),
        path=path,
    )


def encode(name: str, version: int, extension: str) -> str:
    """
    Format a workfile filename.

    Args:
        name: Logical base name
        version: Version number in ``[0, 999]``
        extension: Extension without the leading dot, may be empty

    Returns:
        The filename, e.g. ``shot010_comp_v001.nk``

    Raises:
        InvalidVersionError: If the version does not fit in three digits
    """
    if not 0 <= version <= MAX_VERSION:
        raise InvalidVersionError(f"Version {version} is outside 0-{MAX_VERSION}")
    filename = f"{name}_v{version:03d}"
    if extension:
        filename = f"{filename}.{extension}"
    return filename


def _normalize_extension(extension: str) -> str:
    return extension.lower().lstrip(".")


@safe_path_operation
def list_workfiles(
    task: TaskTreeNode,
    project: Project,
    ignore_extensions: Iterable[str] = (),
) -> List[WorkFile]:
    """
    List the workfiles in the primary work subdirectory of a task, latest first.

    Directories and files that do not follow the naming contract are skipped.

    Args:
        task: Task whose files are listed
        project: Project supplying the work subdirectory names
        ignore_extensions: Extensions to leave out, with or without a dot
    """
    work_dir = task_work_path(task, project)
    ignored = {_normalize_extension(ext) for ext in ignore_extensions}

    files = []
    with os.scandir(work_dir) as entries:
        for entry in entries:
            if not entry.is_file():
                continue
            try:
                workfile = decode(entry.path)
            except NotVersionedError:
                logger.debug(f"Skipping unversioned file {entry.path}")
                continue
            if workfile.extension.lower() in ignored:
                continue
            files.append(workfile)

    files.sort(reverse=True)
    logger.info(f"Found {len(files)} workfiles in {work_dir}")
    return files


def _copy(source: Path, destination: Path, exclusive: bool) -> None:
    if exclusive:
        try:
            with open(source, "rb") as src, open(destination, "xb") as dst:
                shutil.copyfileobj(src, dst)
        except FileExistsError:
            raise AlreadyExistsError(f"File already exists: {destination}", destination)
        return
    shutil.copyfile(source, destination)


@safe_path_operation
def version_up(workfile: WorkFile, exclusive: bool = False) -> WorkFile:
    """
    Copy a workfile to a sibling carrying the next version number.

    Args:
        workfile: The workfile to copy
        exclusive: Create the destination atomically instead of check-then-copy

    Returns:
        The new workfile record

    Raises:
        AlreadyExistsError: If the next version already exists; nothing is copied
        InvalidVersionError: If the next version does not fit in three digits
    """
    new_version = workfile.version + 1
    destination = workfile.path.parent / encode(workfile.name, new_version, workfile.extension)

    if not exclusive and destination.exists():
        raise AlreadyExistsError(f"File already exists: {destination}", destination)

    try:
        _copy(workfile.path, destination, exclusive)
    except OSError as e:
        logger.error(f"Failed to copy {workfile.path} to {destination}: {e}")
        raise

    audit.info(f"version up {workfile.path} -> {destination}")
    return WorkFile(
        name=workfile.name,
        extension=workfile.extension,
        version=new_version,
        path=destination,
    )


def make_filename(logical_name: str, task: TaskTreeNode, project: Project, dcc: Dcc) -> str:
    """Return the filename of the first version of a new workfile."""
    parts = [project.name_sanitized, task.name]
    if logical_name:
        parts.append(logical_name)
    return encode("_".join(parts), FIRST_VERSION, dcc.extension.lstrip("."))


@safe_path_operation
def create_file(
    logical_name: str,
    task: TaskTreeNode,
    project: Project,
    dcc: Dcc,
    exclusive: bool = False,
) -> Path:
    """
    Create a new workfile for a task by copying a template.

    Args:
        logical_name: Optional descriptive segment, e.g. ``layout``
        task: Task receiving the file
        project: Project the task belongs to
        dcc: Template descriptor to instantiate
        exclusive: Create the destination atomically instead of check-then-copy

    Returns:
        Path of the created file

    Raises:
        AlreadyExistsError: If the destination already exists
        TemplateMissingError: If the template source is absent
    """
    destination = task_work_path(task, project) / make_filename(logical_name, task, project, dcc)

    # Checked in both modes so a taken name wins over a missing template
    if destination.exists():
        raise AlreadyExistsError(f"File already exists: {destination}", destination)

    if not dcc.template_path.exists():
        raise TemplateMissingError(f"Template file not found: {dcc.template_path}", dcc.template_path)

    try:
        _copy(dcc.template_path, destination, exclusive)
    except OSError as e:
        logger.error(f"Failed to copy {dcc.template_path} to {destination}: {e}")
        raise

    audit.info(f"create file {destination} from {dcc.template_path}")
    return destination
