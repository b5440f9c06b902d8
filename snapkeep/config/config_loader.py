"""Configuration file loading for snapkeep.

The configuration is a JSON document validated with pydantic and converted
into the engine's ProjectSpec / BackupTarget values. Lookup order when no
explicit path is given:

    1. ./snapkeep.config.json
    2. ~/.snapkeep/config.json

Relative project and target paths are resolved against the directory of the
config file.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from snapkeep.exceptions import ConfigurationError
from snapkeep.models import BackupTarget, LocalTarget, ProjectSpec, RemoteTarget
from snapkeep.reporting import NullReporter, Reporter

DEFAULT_CONFIG_NAME = "snapkeep.config.json"
DEFAULT_HOME_CONFIG_DIR = ".snapkeep"
DEFAULT_HOME_CONFIG_FILE = "config.json"
DEFAULT_MAX_BACKUPS = 10


class _ConfigModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SshConfig(_ConfigModel):
    """Connection details of a remote target."""

    host: str = Field(min_length=1)
    user: Optional[str] = None
    port: Optional[int] = Field(default=None, ge=1, le=65535)
    key_path: Optional[str] = Field(default=None, alias="keyPath")


class ProjectConfig(_ConfigModel):
    """A project entry."""

    name: str = Field(min_length=1)
    path: str = Field(min_length=1)
    exclude: List[str] = Field(default_factory=list)


class LocalTargetConfig(_ConfigModel):
    """A local directory target."""

    name: str = Field(min_length=1)
    type: Literal["local"]
    path: str = Field(min_length=1)


class RemoteTargetConfig(_ConfigModel):
    """A remote target (accepted, not implemented by the engine)."""

    name: str = Field(min_length=1)
    type: Literal["remote"]
    path: str = Field(min_length=1)
    ssh: Optional[SshConfig] = None


TargetConfig = Annotated[
    Union[LocalTargetConfig, RemoteTargetConfig], Field(discriminator="type")
]


class RetentionConfig(_ConfigModel):
    """Retention settings."""

    max_backups_per_project: Optional[int] = Field(
        default=None, ge=1, alias="maxBackupsPerProject"
    )


class AppConfig(_ConfigModel):
    """Top-level configuration document."""

    projects: List[ProjectConfig] = Field(min_length=1)
    backup_targets: List[TargetConfig] = Field(alias="backupTargets", min_length=1)
    retention: Optional[RetentionConfig] = None
    compression: bool = False

    @model_validator(mode="after")
    def _check_unique_names(self) -> "AppConfig":
        for label, names in (
            ("project", [project.name for project in self.projects]),
            ("backup target", [target.name for target in self.backup_targets]),
        ):
            seen = set()
            for name in names:
                if name in seen:
                    raise ValueError(f'Duplicate {label} name "{name}"')
                seen.add(name)
        return self


@dataclass
class LoadedConfig:
    """A validated configuration, converted to engine types."""

    config_path: Path
    projects: List[ProjectSpec]
    targets: List[BackupTarget]
    max_backups: int = DEFAULT_MAX_BACKUPS
    compression: bool = False

    def get_project(self, name: str) -> ProjectSpec:
        """Return the project called `name`.

        Raises:
            ConfigurationError: If no such project is configured.
        """
        for project in self.projects:
            if project.name == name:
                return project
        raise ConfigurationError(f'Project "{name}" not found in config')

    def get_target(self, name: Optional[str] = None) -> BackupTarget:
        """Return the target called `name`, or the first target when `name` is None.

        Raises:
            ConfigurationError: If no such target is configured.
        """
        if name is None:
            return self.targets[0]
        for target in self.targets:
            if target.name == name:
                return target
        raise ConfigurationError(f'Backup target "{name}" not found in config')


class ConfigLoader:
    """Finds, parses and validates the configuration file.

    Args:
        reporter: Sink for warnings about the configuration.
        cwd: Directory searched first. Defaults to the process working directory.
        home: Home directory searched second. Defaults to the user's home.
    """

    def __init__(
        self,
        reporter: Optional[Reporter] = None,
        cwd: Optional[Path] = None,
        home: Optional[Path] = None,
    ) -> None:
        self.reporter = reporter if reporter is not None else NullReporter()
        self._cwd = cwd
        self._home = home

    def find_config_file(self, config_path: Optional[Path] = None) -> Path:
        """Locate the configuration file.

        Raises:
            ConfigurationError: If no configuration file can be found.
        """
        if config_path is not None:
            path = Path(config_path).expanduser().resolve()
            if not path.is_file():
                raise ConfigurationError(f"Config file not found: {path}")
            return path

        cwd = self._cwd if self._cwd is not None else Path.cwd()
        home = self._home if self._home is not None else Path.home()

        cwd_config = cwd / DEFAULT_CONFIG_NAME
        if cwd_config.is_file():
            return cwd_config.resolve()

        home_config = home / DEFAULT_HOME_CONFIG_DIR / DEFAULT_HOME_CONFIG_FILE
        if home_config.is_file():
            return home_config.resolve()

        raise ConfigurationError(
            f"Config file not found. Please create {DEFAULT_CONFIG_NAME} "
            f"in the current directory or {home_config}"
        )

    def load(self, config_path: Optional[Path] = None) -> LoadedConfig:
        """Load and validate the configuration.

        Args:
            config_path: Explicit config file; the search order applies if None.

        Returns:
            LoadedConfig with absolute project and local target paths.

        Raises:
            ConfigurationError: If the file is missing, not valid JSON, or
                fails validation, or if a local target lies inside a project.
        """
        path = self.find_config_file(config_path)
        self.reporter.debug(f"Loading config from: {path}")

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in config file {path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to load config {path}: {e}") from e

        try:
            app_config = AppConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(_format_validation_error(path, e)) from e

        config_dir = path.parent
        projects = [self._to_project(project, config_dir) for project in app_config.projects]
        targets = [self._to_target(target, config_dir) for target in app_config.backup_targets]
        _check_targets_outside_projects(projects, targets)

        max_backups = DEFAULT_MAX_BACKUPS
        if app_config.retention and app_config.retention.max_backups_per_project is not None:
            max_backups = app_config.retention.max_backups_per_project

        return LoadedConfig(
            config_path=path,
            projects=projects,
            targets=targets,
            max_backups=max_backups,
            compression=app_config.compression,
        )

    def _to_project(self, project: ProjectConfig, config_dir: Path) -> ProjectSpec:
        root_path = _resolve(project.path, config_dir)
        if not root_path.exists():
            raise ConfigurationError(f"Project path does not exist: {project.path}")
        if not root_path.is_dir():
            raise ConfigurationError(f'Project path "{project.path}" is not a directory')
        return ProjectSpec(
            name=project.name,
            root_path=root_path,
            exclude_patterns=tuple(project.exclude),
        )

    def _to_target(
        self, target: Union[LocalTargetConfig, RemoteTargetConfig], config_dir: Path
    ) -> BackupTarget:
        if isinstance(target, LocalTargetConfig):
            base_path = _resolve(target.path, config_dir)
            if not base_path.exists():
                self.reporter.warn(
                    f"Backup target path does not exist: {target.path}. "
                    "It will be created on first backup."
                )
            return LocalTarget(name=target.name, base_path=base_path)

        if isinstance(target, RemoteTargetConfig):
            self.reporter.debug(
                f'Remote target "{target.name}" configured (implementation stubbed)'
            )
            connection_info = target.ssh.model_dump(exclude_none=True) if target.ssh else None
            return RemoteTarget(
                name=target.name, base_path=target.path, connection_info=connection_info
            )

        raise ConfigurationError(f"Unknown backup target type: {type(target).__name__}")


def _check_targets_outside_projects(
    projects: List[ProjectSpec], targets: List[BackupTarget]
) -> None:
    """Reject local targets stored inside a project they would back up."""
    for target in targets:
        if not isinstance(target, LocalTarget):
            continue
        for project in projects:
            root = project.root_path
            if target.base_path == root or root in target.base_path.parents:
                raise ConfigurationError(
                    f'Backup target "{target.name}" ({target.base_path}) is inside '
                    f'project "{project.name}" ({root}). Move the target outside '
                    "the project directory."
                )


def _resolve(raw_path: str, config_dir: Path) -> Path:
    path = Path(raw_path).expanduser()
    if not path.is_absolute():
        path = config_dir / path
    return path.resolve()


def _format_validation_error(path: Path, error: ValidationError) -> str:
    lines = [f"Invalid config file {path}:"]
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "config"
        lines.append(f"  {location}: {detail['msg']}")
    return "\n".join(lines)
