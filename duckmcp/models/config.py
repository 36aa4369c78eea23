"""Target and server configuration for DuckDB MCP Server."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field


class DatabaseConfig(BaseModel):
    """Immutable description of the target the server was started with."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Database file or data directory")
    is_directory: bool = Field(..., description="Directory of data files rather than a database file")
    readonly: bool = Field(True, description="Whether the target is exposed read-only")

    @property
    def mode(self) -> str:
        return "directory" if self.is_directory else "database file"


class ServerSettings:
    """Server settings resolved from CLI overrides, environment, YAML and defaults."""

    DEFAULTS: Dict[str, Any] = {
        'log_level': 'INFO',
        'log_json': False,
        'log_file': None,
        'default_limit': 100,
        'transport': 'stdio',
        'host': '127.0.0.1',
        'port': 3000,
        'health_port': None,
    }

    ENV_VARS: Dict[str, str] = {
        'log_level': 'LOG_LEVEL',
        'log_json': 'LOG_JSON',
        'log_file': 'LOG_FILE',
        'default_limit': 'DUCKMCP_DEFAULT_LIMIT',
        'transport': 'DUCKMCP_TRANSPORT',
        'host': 'DUCKMCP_HOST',
        'port': 'DUCKMCP_PORT',
        'health_port': 'DUCKMCP_HEALTH_PORT',
    }

    INT_KEYS = ('default_limit', 'port', 'health_port')
    BOOL_KEYS = ('log_json',)

    def __init__(self, overrides: Optional[Dict[str, Any]] = None, config_path: Optional[str] = None):
        load_dotenv()

        self.config_path: Optional[Path] = None
        self._values: Dict[str, Any] = dict(self.DEFAULTS)

        # Lowest to highest priority
        self._values.update(self._load_yaml(config_path))
        self._values.update(self._load_env())
        if overrides:
            self._values.update({k: v for k, v in overrides.items() if v is not None and k in self.DEFAULTS})

        self.validate()

    def _load_yaml(self, config_path: Optional[str]) -> Dict[str, Any]:
        """Load settings from a YAML file if one can be found."""
        candidates = []
        explicit = config_path or os.getenv('DUCKMCP_CONFIG')
        if explicit:
            candidates.append(Path(explicit))
        candidates.append(Path('config') / 'duckmcp.yaml')

        for path in candidates:
            if not path.is_file():
                if explicit and path == Path(explicit):
                    raise ValueError(f"Configuration file not found: {path}")
                continue
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}")

            if not isinstance(data, dict):
                raise ValueError(f"Configuration file {path} must contain a mapping")

            self.config_path = path
            section = data.get('server', data)
            return {k: v for k, v in section.items() if k in self.DEFAULTS}

        return {}

    def _load_env(self) -> Dict[str, Any]:
        """Load settings from environment variables."""
        values = {}
        for key, env_name in self.ENV_VARS.items():
            raw = os.getenv(env_name)
            if raw is None or raw == '':
                continue
            if key in self.INT_KEYS:
                try:
                    values[key] = int(raw)
                except ValueError:
                    raise ValueError(f"Invalid {env_name} value: {raw}")
            elif key in self.BOOL_KEYS:
                values[key] = raw.strip().lower() in ('1', 'true', 'yes', 'on')
            else:
                values[key] = raw
        return values

    def validate(self):
        """Validate resolved settings."""
        for key in self.INT_KEYS:
            value = self._values.get(key)
            if value is None and key == 'health_port':
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Setting '{key}' must be an integer, got {value!r}")

        if self.default_limit <= 0:
            raise ValueError(f"Setting 'default_limit' must be positive, got {self.default_limit}")
        if self.transport not in ('stdio', 'sse'):
            raise ValueError(f"Setting 'transport' must be 'stdio' or 'sse', got {self.transport!r}")

    @property
    def log_level(self) -> str:
        return str(self._values['log_level']).upper()

    @property
    def log_json(self) -> bool:
        return bool(self._values['log_json'])

    @property
    def log_file(self) -> Optional[str]:
        return self._values['log_file']

    @property
    def default_limit(self) -> int:
        return self._values['default_limit']

    @property
    def transport(self) -> str:
        return self._values['transport']

    @property
    def host(self) -> str:
        return self._values['host']

    @property
    def port(self) -> int:
        return self._values['port']

    @property
    def health_port(self) -> Optional[int]:
        return self._values['health_port']

    def to_dict(self) -> Dict[str, Any]:
        """Return the resolved settings."""
        return dict(self._values)
