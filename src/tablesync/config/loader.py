"""Persistence of the sync connection config as JSON or YAML."""

import json
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import ValidationError

from .schema import SyncConfig
from .settings import get_settings
from ..exceptions import ConfigurationError
from ..utils.logging import get_logger, mask_secret


class ConfigLoader:
    """Loads and saves the sync config file."""

    def __init__(self, file_path: Optional[Union[str, Path]] = None):
        """Initialize the loader.

        Args:
            file_path: Config file location; defaults to
                ``<config_dir>/<config_file_name>`` from the app settings
        """
        if file_path is None:
            settings = get_settings()
            file_path = Path(settings.config_dir) / settings.config_file_name
        self.file_path = Path(file_path)
        self.logger = get_logger(self.__class__.__name__)

    def exists(self) -> bool:
        return self.file_path.exists()

    def save(self, config: SyncConfig) -> None:
        """Write the config, creating the parent directory if needed.

        Raises:
            ConfigurationError: If the file cannot be written
        """
        data = config.to_dict()

        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.file_path, 'w', encoding='utf-8') as f:
                if self._is_yaml():
                    yaml.safe_dump(data, f, default_flow_style=False, indent=2, allow_unicode=True)
                else:
                    json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigurationError(f"Failed to write config file {self.file_path}: {e}") from e

        self.logger.info(
            "Sync configuration saved",
            file_path=str(self.file_path),
            app_id=mask_secret(config.app_id),
            app_token=config.app_token,
            table_id=config.table_id
        )

    def load(self) -> Optional[SyncConfig]:
        """Read the config, including the secret.

        Returns:
            The stored SyncConfig, or None when no file has been saved yet

        Raises:
            ConfigurationError: If the file exists but cannot be read or parsed
        """
        if not self.file_path.exists():
            self.logger.debug("No sync configuration found", file_path=str(self.file_path))
            return None

        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                if self._is_yaml():
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except OSError as e:
            raise ConfigurationError(f"Failed to read config file {self.file_path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {self.file_path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {self.file_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {self.file_path} does not contain a mapping")

        try:
            return SyncConfig(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid sync configuration: {e}") from e

    def load_public(self) -> Optional[SyncConfig]:
        """Read the config with the secret masked, for display."""
        config = self.load()
        return config.masked() if config else None

    def _is_yaml(self) -> bool:
        return self.file_path.suffix.lower() in ('.yaml', '.yml')
