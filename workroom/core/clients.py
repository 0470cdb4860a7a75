"""Client list offered when naming projects, stored as a YAML list."""

import logging
from pathlib import Path
from typing import List

import yaml

from .exceptions import DescriptorError, DuplicateClientError, NotFoundError, ValidationError
from .error_handler import safe_path_operation
from .models import Client
from .naming import sanitize_name


logger = logging.getLogger(__name__)


@safe_path_operation
def load_clients(clients_path: Path) -> List[Client]:
    """
    Read the client list. A missing file reads as an empty list.

    Raises:
        DescriptorError: If the file is not a list of ``name``/``short_name`` records
    """
    clients_path = Path(clients_path)
    if not clients_path.exists():
        return []

    logger.info(f"Attempting to open: {clients_path}")
    with open(clients_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise DescriptorError(f"Failed to get client list: {e}") from e

    if data is None:
        return []
    if not isinstance(data, list):
        raise DescriptorError(f"Client list {clients_path} must be a list")

    clients = []
    for record in data:
        if not isinstance(record, dict):
            raise DescriptorError(f"Invalid client record in {clients_path}: {record!r}")
        try:
            clients.append(Client(name=str(record["name"]), short_name=str(record["short_name"])))
        except KeyError as e:
            raise DescriptorError(f"Client record in {clients_path} is missing {e}") from e
    return clients


@safe_path_operation
def save_clients(clients: List[Client], clients_path: Path) -> None:
    clients_path = Path(clients_path)
    clients_path.parent.mkdir(parents=True, exist_ok=True)
    with open(clients_path, "w", encoding="utf-8") as f:
        yaml.safe_dump([c.to_dict() for c in clients], f, default_flow_style=False, sort_keys=False)
    logger.info(f"Wrote {len(clients)} clients to {clients_path}")


def add_client(clients_path: Path, name: str, short_name: str) -> Client:
    """
    Register a client. The short name is sanitized before it is stored.

    Raises:
        DuplicateClientError: If the name or short name is already registered
        ValidationError: If either name is empty after cleaning
    """
    client = Client(name=name.strip(), short_name=sanitize_name(short_name))
    if not client.name or not client.short_name:
        raise ValidationError("Client name and short name must not be empty")

    clients = load_clients(clients_path)
    for existing in clients:
        if existing.name == client.name or existing.short_name == client.short_name:
            raise DuplicateClientError("Client with same name already exists.")

    clients.append(client)
    save_clients(clients, clients_path)
    return client


def remove_client(clients_path: Path, name: str) -> None:
    """
    Remove the client called ``name``.

    Raises:
        NotFoundError: If no client has that name
    """
    logger.info(f"Attempting to remove: {name}")
    clients = load_clients(clients_path)
    remaining = [c for c in clients if c.name != name]
    if len(remaining) == len(clients):
        raise NotFoundError(f"No client named '{name}'")
    save_clients(remaining, clients_path)
