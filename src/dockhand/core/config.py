"""Configuration loading."""

import asyncio
import io
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from ruamel.yaml import YAML
from pydantic import ValidationError

from dockhand.models.config import DockhandConfig


logger = logging.getLogger(__name__)

CONFIG_ENV = "DOCKHAND_CONFIG"
DEFAULT_CONFIG_PATH = Path("/etc/dockhand/config.yaml")


class ConfigManager:
    """Loads the optional YAML configuration file.

    Lookup order: explicit path, the DOCKHAND_CONFIG environment variable,
    then /etc/dockhand/config.yaml. With no file the built-in defaults apply.
    """

    def __init__(self, config_path: Optional[Path] = None, environ: Optional[Dict[str, str]] = None):
        environ = os.environ if environ is None else environ
        self.explicit = config_path is not None or bool(environ.get(CONFIG_ENV))
        if config_path is not None:
            self.config_path = Path(config_path)
        elif environ.get(CONFIG_ENV):
            self.config_path = Path(environ[CONFIG_ENV])
        else:
            self.config_path = DEFAULT_CONFIG_PATH
        self.yaml = YAML()
        self.yaml.preserve_quotes = True
        self.config: Optional[DockhandConfig] = None

    async def load(self) -> DockhandConfig:
        """Load and validate configuration."""
        if not self.config_path.exists():
            if self.explicit:
                raise FileNotFoundError(f"Config not found: {self.config_path}")
            logger.debug(f"No config at {self.config_path}, using defaults")
            self.config = DockhandConfig()
            return self.config

        try:
            data = await self._read_yaml(self.config_path)
            self.config = DockhandConfig(**data)
            logger.debug(f"Loaded config: {self.config_path}")
        except ValidationError as e:
            logger.error(f"Invalid config {self.config_path}: {e}")
            raise
        return self.config

    async def _read_yaml(self, file_path: Path) -> Dict[str, Any]:
        """Read and parse YAML file."""
        content = await asyncio.to_thread(file_path.read_text)
        data = self.yaml.load(content)
        return dict(data) if data else {}

    def dump(self) -> str:
        """Effective configuration as YAML."""
        config = self.config or DockhandConfig()
        stream = io.StringIO()
        YAML().dump(config.model_dump(), stream)
        return stream.getvalue()
