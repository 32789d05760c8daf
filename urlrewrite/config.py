"""
Config system - layered configuration for rule sets.

Sources, later overriding earlier:

1. YAML or JSON config files (``urlrewrite.yaml`` when none are given)
2. ``.env`` file entries carrying the prefix
3. Environment variables carrying the prefix (``URW_CACHE_SIZE=64``)
4. Manual overrides
"""

import json
import logging
import os
import types
from dataclasses import MISSING, dataclass, field, fields
from glob import glob
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, Union, get_args, get_origin

import yaml
from dotenv import dotenv_values

logger = logging.getLogger("urlrewrite.config")

DEFAULT_CONFIG_FILES = ("urlrewrite.yaml", "urlrewrite.yml", "urlrewrite.json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Raised when configuration validation fails."""
    pass


@dataclass
class RewriteConfig:
    """Settings for a rule set."""
    cache_size: int = 256
    cache_ttl: Optional[float] = None
    log_level: str = "WARNING"
    rules: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cache_size": self.cache_size,
            "cache_ttl": self.cache_ttl,
            "log_level": self.log_level,
            "rules": list(self.rules),
        }


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources with precedence:
    overrides > environment variables > .env file > config files > defaults
    """

    def __init__(self, env_prefix: str = "URW_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[List[str]] = None,
        env_prefix: str = "URW_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from every source.

        Args:
            paths: Config file paths (glob patterns supported)
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Raises:
            ConfigError: a config file could not be read
        """
        loader = cls(env_prefix=env_prefix)

        if not paths:
            paths = [name for name in DEFAULT_CONFIG_FILES if Path(name).exists()][:1]

        for pattern in paths:
            loader._load_from_files(pattern)

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_from_files(self, pattern: str):
        matched = sorted(glob(pattern))
        if not matched:
            raise ConfigError(f"Config file not found: {pattern}")

        for path_str in matched:
            path = Path(path_str)
            if path.suffix == ".json":
                self._load_json_file(path)
            elif path.suffix in (".yaml", ".yml"):
                self._load_yaml_file(path)
            else:
                raise ConfigError(f"Unsupported config file type: {path}")

    def _load_json_file(self, path: Path):
        try:
            with open(path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e
        self._merge_file_data(path, data)

    def _load_yaml_file(self, path: Path):
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        self._merge_file_data(path, data)

    def _merge_file_data(self, path: Path, data: Any):
        if not data:
            return
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        logger.debug("Loaded config from %s", path)
        self._merge_dict(self.config_data, data)

    def _load_env_file(self, path: str):
        """Load prefixed entries from a .env file."""
        if not Path(path).exists():
            return

        for key, value in dotenv_values(path).items():
            if value is not None and key.startswith(self.env_prefix):
                self._set_key(key, value)

    def _load_from_env(self):
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_key(key, value)

    def _set_key(self, key: str, value: str):
        """Convert URW_CACHE_SIZE to ``cache_size``."""
        name = key[len(self.env_prefix):].lower()
        self.config_data[name] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self.config_data.get(key, default)

    def to_rewrite_config(self) -> RewriteConfig:
        """
        Validate the merged data into a :class:`RewriteConfig`.

        Unknown keys are ignored.

        Raises:
            ConfigError: a value has the wrong type
        """
        kwargs = {}

        for field_info in fields(RewriteConfig):
            if field_info.name in self.config_data:
                value = self.config_data[field_info.name]
                if not self._check_type(value, field_info.type):
                    raise ConfigError(
                        f"Config field '{field_info.name}' expected {field_info.type}, "
                        f"got {type(value).__name__}"
                    )
                kwargs[field_info.name] = value
            elif field_info.default is not MISSING:
                kwargs[field_info.name] = field_info.default
            else:
                kwargs[field_info.name] = field_info.default_factory()

        config = RewriteConfig(**kwargs)
        if not all(isinstance(rule, str) for rule in config.rules):
            raise ConfigError("Config field 'rules' must be a list of rule strings")
        if config.cache_size < 0:
            raise ConfigError("Config field 'cache_size' must not be negative")
        if config.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(f"Config field 'log_level' must be one of {', '.join(LOG_LEVELS)}")
        return config

    def _check_type(self, value: Any, expected_type: Type) -> bool:
        """Basic type checking."""
        origin = get_origin(expected_type)
        if origin is types.UnionType or origin is Union:
            if value is None:
                return True
            args = [arg for arg in get_args(expected_type) if arg is not type(None)]
            return any(self._check_type(value, arg) for arg in args)

        if origin:
            return isinstance(value, origin)

        # bool is an int subclass; neither counts as the other here
        if isinstance(value, bool):
            return expected_type is bool
        if expected_type is float:
            return isinstance(value, (int, float))
        return isinstance(value, expected_type)

    def to_dict(self) -> dict:
        return self.config_data.copy()


def load_config(
    paths: Optional[List[str]] = None,
    env_file: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> RewriteConfig:
    """Load and validate a :class:`RewriteConfig` in one call."""
    return ConfigLoader.load(paths=paths, env_file=env_file, overrides=overrides).to_rewrite_config()
