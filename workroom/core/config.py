"""Configuration management for the Workroom production file organizer."""

import os
import sys
import json
import logging
import configparser
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Union, get_args, get_origin

from .exceptions import ConfigurationError
from .models import Project


CONFIG_ENV_VAR = "WORKROOM_CONFIG"
DEFAULT_DATA_DIR = Path.home() / ".workroom"


@dataclass
class PathsConfig:
    """Where projects, templates and the client list live."""
    projects_dir: Optional[Path] = None
    templates_dir: Optional[Path] = None
    clients_file: Optional[Path] = None
    projects_dir_windows: Optional[Path] = None
    templates_dir_windows: Optional[Path] = None

    def _for_platform(self, default: Optional[Path], windows: Optional[Path], platform: str) -> Optional[Path]:
        if platform == "win32" and windows is not None:
            return windows
        return default

    def resolved_projects_dir(self, platform: str = sys.platform) -> Optional[Path]:
        return self._for_platform(self.projects_dir, self.projects_dir_windows, platform)

    def resolved_templates_dir(self, platform: str = sys.platform) -> Optional[Path]:
        templates_dir = self._for_platform(self.templates_dir, self.templates_dir_windows, platform)
        if templates_dir is None:
            projects_dir = self.resolved_projects_dir(platform)
            if projects_dir is not None:
                return projects_dir / "templates"
        return templates_dir


@dataclass
class LayoutConfig:
    """Directory names new projects and tasks are created with."""
    pipeline_dir_name: str = "00_pipeline"
    work_dir_name: str = "02_work"
    dailies_dir_name: str = "03_dailies"
    deliveries_dir_name: str = "04_deliveries"
    extra_dir_names: List[str] = field(default_factory=lambda: ["01_preproduction"])
    work_sub_dirs: List[str] = field(default_factory=lambda: ["01_work", "02_output", "03_assets"])

    def template_project(self) -> Project:
        """Return a nameless project carrying this layout."""
        return Project(
            name="",
            name_sanitized="",
            pipeline_dir_name=self.pipeline_dir_name,
            work_dir_name=self.work_dir_name,
            dailies_dir_name=self.dailies_dir_name,
            deliveries_dir_name=self.deliveries_dir_name,
            extra_dir_names=tuple(self.extra_dir_names),
            work_sub_dirs=tuple(self.work_sub_dirs),
        )


@dataclass
class TaskConfig:
    """How task folders are recognised."""
    convention: str = "marker"  # marker or subdirs
    marker_name: str = "task.yaml"


@dataclass
class ProjectsConfig:
    """How project folders are recognised."""
    legacy_layout: bool = False


@dataclass
class FilesConfig:
    """Workfile listing and creation settings."""
    ignore_extensions: List[str] = field(default_factory=list)
    exclusive_create: bool = False


@dataclass
class WebConfig:
    """Web interface configuration settings."""
    host: str = "127.0.0.1"
    port: int = 5000
    debug: bool = False
    secret_key: str = "dev-key-change-in-production"


@dataclass
class LoggingConfig:
    """Logging configuration settings."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_enabled: bool = True
    file_path: Optional[Path] = None
    file_max_size_mb: int = 10
    file_backup_count: int = 5
    console_enabled: bool = True
    audit_enabled: bool = True

    def __post_init__(self):
        if self.file_path is None:
            self.file_path = DEFAULT_DATA_DIR / "logs" / "workroom.log"


@dataclass
class AppConfig:
    """Main application configuration."""
    paths: PathsConfig = field(default_factory=PathsConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    tasks: TaskConfig = field(default_factory=TaskConfig)
    projects: ProjectsConfig = field(default_factory=ProjectsConfig)
    files: FilesConfig = field(default_factory=FilesConfig)
    web: WebConfig = field(default_factory=WebConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Application metadata
    app_name: str = "Workroom"
    version: str = "0.1.0"


SECTIONS = ("paths", "layout", "tasks", "projects", "files", "web", "logging")


def _unwrap_optional(field_type: Any) -> Any:
    if get_origin(field_type) is Union:
        args = [arg for arg in get_args(field_type) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return field_type


def convert_value(field_type: Any, raw: str) -> Any:
    """
    Convert an INI string into the type declared on a config dataclass field.

    Lists are comma separated, empty strings become ``None`` for optional fields.

    Raises:
        ConfigurationError: If the value cannot be converted
    """
    optional = get_origin(field_type) is Union and type(None) in get_args(field_type)
    target = _unwrap_optional(field_type)
    raw = raw.strip()

    if optional and raw in ("", "None"):
        return None
    try:
        if target is bool:
            return raw.lower() in ("true", "1", "yes", "on")
        if target is int:
            return int(raw)
        if target is float:
            return float(raw)
        if target is Path:
            return Path(raw).expanduser()
        if get_origin(target) in (list, List):
            return [item.strip() for item in raw.split(",") if item.strip()]
    except ValueError as e:
        raise ConfigurationError(f"Invalid value '{raw}': {e}") from e
    return raw


def format_value(value: Any) -> str:
    """Convert a config value into its INI string."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return str(value)


def default_config_file() -> Path:
    """Return the config file named by ``WORKROOM_CONFIG``, or the default location."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_DATA_DIR / "config.ini"


class ConfigManager:
    """Manages application configuration stored in an INI file."""

    def __init__(self, config_file: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Path to configuration file. If None, uses ``WORKROOM_CONFIG``
                or the default location.
        """
        if config_file is None:
            config_file = default_config_file()

        self.config_file = Path(config_file)
        self.config = AppConfig()
        self.logger = logging.getLogger(__name__)

        # Load configuration from file if it exists
        if self.config_file.exists():
            self.load_from_file()
        else:
            # Create default configuration file
            self.save_to_file()

    def load_from_file(self) -> None:
        """
        Load configuration from INI file.

        Raises:
            ConfigurationError: If the file cannot be parsed or holds invalid values
        """
        parser = configparser.ConfigParser(interpolation=None)
        try:
            parser.read(self.config_file, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigurationError(f"Error loading configuration from {self.config_file}: {e}") from e

        for section_name in SECTIONS:
            if section_name not in parser:
                continue
            section = getattr(self.config, section_name)
            for section_field in fields(section):
                if section_field.name in parser[section_name]:
                    raw = parser[section_name][section_field.name]
                    try:
                        value = convert_value(section_field.type, raw)
                    except ConfigurationError as e:
                        raise ConfigurationError(
                            f"{self.config_file}: [{section_name}] {section_field.name}: {e}"
                        ) from e
                    setattr(section, section_field.name, value)

            for key in parser[section_name]:
                if not hasattr(section, key):
                    self.logger.warning(f"Unknown configuration key: {section_name}.{key}")

        self.logger.info(f"Configuration loaded from {self.config_file}")

    def save_to_file(self) -> None:
        """Save current configuration to INI file."""
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)

            parser = configparser.ConfigParser(interpolation=None)
            for section_name in SECTIONS:
                section = getattr(self.config, section_name)
                parser[section_name] = {
                    section_field.name: format_value(getattr(section, section_field.name))
                    for section_field in fields(section)
                }

            with open(self.config_file, "w", encoding="utf-8") as f:
                parser.write(f)

            self.logger.info(f"Configuration saved to {self.config_file}")

        except OSError as e:
            self.logger.error(f"Error saving configuration to {self.config_file}: {e}")

    def get_config(self) -> AppConfig:
        """Get the current configuration."""
        return self.config

    def set_value(self, key: str, value: str) -> Any:
        """
        Set a configuration value using ``section.key`` notation and save it.

        Returns:
            The converted value

        Raises:
            ConfigurationError: For unknown keys or invalid values
        """
        keys = key.split(".")
        if len(keys) != 2:
            raise ConfigurationError("Key must be in format 'section.key' (e.g., 'paths.projects_dir')")

        section_name, setting = keys
        if section_name not in SECTIONS:
            raise ConfigurationError(f"Unknown configuration section: {section_name}")

        section = getattr(self.config, section_name)
        field_types = {f.name: f.type for f in fields(section)}
        if setting not in field_types:
            raise ConfigurationError(f"Unknown setting '{setting}' in section '{section_name}'")

        converted = convert_value(field_types[setting], value)
        setattr(section, setting, converted)
        self.save_to_file()
        return converted

    def reset_to_defaults(self) -> None:
        """Reset configuration to default values."""
        self.config = AppConfig()
        self.save_to_file()
        self.logger.info("Configuration reset to defaults")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self.config)
        for section_name in SECTIONS:
            for key, value in data[section_name].items():
                if isinstance(value, Path):
                    data[section_name][key] = str(value)
        return data

    def export_to_json(self, file_path: Path) -> None:
        """
        Export configuration to JSON format.

        Args:
            file_path: Path to save JSON file
        """
        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

        self.logger.info(f"Configuration exported to {file_path}")


# Global configuration instance
_config_manager = None


def get_config() -> AppConfig:
    """Get the global application configuration."""
    return get_config_manager().get_config()


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def setup_config(config_file: Optional[Path] = None) -> ConfigManager:
    """
    Set up global configuration.

    Args:
        config_file: Optional path to configuration file

    Returns:
        ConfigManager instance
    """
    global _config_manager
    _config_manager = ConfigManager(config_file)
    return _config_manager
