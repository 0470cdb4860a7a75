"""Discovery of workfile templates (one folder per application)."""

import logging
import os
from pathlib import Path
from typing import List

import yaml

from .exceptions import DescriptorError
from .error_handler import ErrorHandler, safe_path_operation
from .models import Dcc


logger = logging.getLogger(__name__)

APP_FILE_NAME = "app.yaml"


def read_dcc(folder: Path) -> Dcc:
    """
    Load the template descriptor stored in ``folder``.

    The folder holds an ``app.yaml`` with ``name`` and ``extension`` and a
    ``template{extension}`` file.

    Raises:
        DescriptorError: If the descriptor or the template file is unusable
    """
    folder = Path(folder)
    config_path = folder / APP_FILE_NAME
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise DescriptorError(f"Could not load config {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise DescriptorError(f"Could not parse config {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise DescriptorError(f"Template config {config_path} must be a mapping")
    name = data.get("name")
    extension = data.get("extension")
    if not isinstance(name, str) or not isinstance(extension, str) or not extension.strip("."):
        raise DescriptorError(f"Template config {config_path} needs a name and an extension")

    extension = "." + extension.lstrip(".")
    template_path = folder / f"template{extension}"
    if not template_path.is_file():
        raise DescriptorError(f"Template file not found: {template_path}")

    return Dcc(name=name, extension=extension, template_path=template_path)


@safe_path_operation
def find_dccs(templates_root: Path) -> List[Dcc]:
    """
    Find every usable template below ``templates_root``.

    Folders without a valid ``app.yaml`` or template file are logged and skipped.

    Raises:
        FileSystemError: If ``templates_root`` cannot be listed
    """
    templates_root = Path(templates_root)
    logger.info(f"Looking for DCC in: {templates_root}")

    dccs = []
    skipped = []
    with os.scandir(templates_root) as entries:
        for entry in entries:
            if not entry.is_dir():
                continue
            try:
                dcc = read_dcc(Path(entry.path))
            except DescriptorError as e:
                logger.error(f"Could not load dcc: {e}")
                skipped.append(e)
                continue
            logger.info(f"Found dcc config: {dcc.name}")
            dccs.append(dcc)

    if skipped:
        ErrorHandler(logger).log_error_summary(skipped, "template discovery")

    dccs.sort()
    return dccs
