"""Configuration management for reposcope."""

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Protocol

import yaml  # type: ignore
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .errors import ConfigError, GroupNotFoundError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "REPOSCOPE_CONFIG"

MAX_NAME_LENGTH = 100

# Characters that break picker lines, shell integration or path handling
FORBIDDEN_NAME_CHARS = [
    "/", "\\", ":", "*", "?", '"', "<", ">", "|", ";", "&", "$", "`",
    "(", ")", "{", "}", "[", "]",
]


class GroupSource(Protocol):
    """Read-only source of repository group membership."""

    def get_group_repositories(self, group_name: str) -> Dict[str, str]: ...

    def get_group_names(self) -> List[str]: ...


def validate_name(name: str) -> str:
    """Validate a repository alias or group name.

    Args:
        name: Alias or group name

    Returns:
        The unchanged name

    Raises:
        ValueError: If the name is empty, too long or contains unsafe characters
    """
    if not name:
        raise ValueError("name cannot be empty")
    if len(name) > MAX_NAME_LENGTH:
        raise ValueError(f"name too long (max {MAX_NAME_LENGTH} characters)")
    for char in FORBIDDEN_NAME_CHARS:
        if char in name:
            raise ValueError(f"name '{name}' contains forbidden character: {char}")
    if any(ord(c) < 32 or ord(c) == 127 for c in name):
        raise ValueError(f"name '{name}' contains control character")
    return name


def expand_path(path: str) -> str:
    """Expand ``~`` and environment variables and make the path absolute."""
    return os.path.abspath(os.path.expandvars(os.path.expanduser(path)))


class RepositoryGroup(BaseModel):
    """A named set of repository aliases."""

    name: str = Field(default="", description="Group name (defaults to its key)")
    description: str = Field(default="", description="Free-form description")
    repositories: List[str] = Field(
        default_factory=list, description="Aliases of member repositories"
    )


class SearchSettings(BaseModel):
    """Timeouts and presentation settings for search and selection."""

    file_search_timeout: float = Field(
        default=10.0, gt=0, description="Shared deadline for fd file search (seconds)"
    )
    content_search_timeout: float = Field(
        default=15.0, gt=0, description="Shared deadline for rg content search (seconds)"
    )
    fallback_search_timeout: float = Field(
        default=30.0, gt=0, description="Shared deadline for the directory walk (seconds)"
    )
    max_count_per_file: int = Field(
        default=50, gt=0, description="Maximum rg matches reported per file"
    )
    basic_display_limit: int = Field(
        default=20, gt=0, description="Results listed by the numbered prompt"
    )
    picker_height: str = Field(default="50%", description="fzf --height value")
    preview_command: Optional[str] = Field(
        default=None, description="Optional fzf --preview command"
    )


class Config(BaseModel):
    """Main configuration for reposcope."""

    repositories: Dict[str, str] = Field(
        default_factory=dict, description="Repository alias to absolute path"
    )
    groups: Dict[str, RepositoryGroup] = Field(default_factory=dict)
    settings: SearchSettings = Field(default_factory=SearchSettings)

    @field_validator("repositories")
    @classmethod
    def validate_repositories(cls, v: Dict[str, str]) -> Dict[str, str]:
        expanded = {}
        for alias, path in v.items():
            validate_name(alias)
            if not path:
                raise ValueError(f"repository path cannot be empty for alias '{alias}'")
            expanded[alias] = expand_path(path)
        return expanded

    @field_validator("groups")
    @classmethod
    def validate_group_names(
        cls, v: Dict[str, RepositoryGroup]
    ) -> Dict[str, RepositoryGroup]:
        for name, group in v.items():
            validate_name(name)
            if not group.name:
                group.name = name
        return v

    @model_validator(mode="after")
    def validate_group_members(self) -> "Config":
        for name, group in self.groups.items():
            for alias in group.repositories:
                if alias not in self.repositories:
                    raise ValueError(
                        f"group '{name}' references non-existent repository '{alias}'"
                    )
        return self


class ConfigManager:
    """Loads the YAML configuration and answers group lookups."""

    DEFAULT_CONFIG_PATH = Path.home() / ".config" / "reposcope" / "config.yml"

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self._default_path()
        self._config: Optional[Config] = None

    @classmethod
    def _default_path(cls) -> Path:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path)
        return cls.DEFAULT_CONFIG_PATH

    def load(self) -> Config:
        """Load configuration from file, or an empty default if it doesn't exist.

        Raises:
            ConfigError: If the file is not valid YAML or fails validation
        """
        if not self.config_path.exists():
            logger.debug(f"No config at {self.config_path}, using defaults")
            self._config = Config()
            return self._config

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (yaml.YAMLError, OSError) as e:
            raise ConfigError(
                f"Failed to read config from {self.config_path}: {e}"
            ) from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config at {self.config_path} must be a mapping")

        try:
            self._config = Config(**data)
        except ValidationError as e:
            raise ConfigError(
                f"Configuration validation failed for {self.config_path}: {e}"
            ) from e

        for alias, path in self._config.repositories.items():
            if not os.path.exists(path):
                logger.warning(
                    f"Repository path '{path}' for alias '{alias}' does not exist"
                )

        return self._config

    def get_config(self) -> Config:
        """Return the loaded configuration, loading it on first use."""
        if self._config is None:
            return self.load()
        return self._config

    def get_group_repositories(self, group_name: str) -> Dict[str, str]:
        """Return alias -> path for the members of a group.

        Members that are not configured repositories are left out.

        Raises:
            GroupNotFoundError: If the group is not configured
        """
        config = self.get_config()
        group = config.groups.get(group_name)
        if group is None:
            raise GroupNotFoundError(group_name)

        return {
            alias: config.repositories[alias]
            for alias in group.repositories
            if alias in config.repositories
        }

    def get_group_names(self) -> List[str]:
        """Return the names of all configured groups."""
        return list(self.get_config().groups.keys())
