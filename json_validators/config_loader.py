"""Settings loading and schema document fetching with caching."""

import copy
import hashlib
import logging
import os
import urllib.parse
from importlib.resources import files
from pathlib import Path
from typing import Any, Dict, Optional

import requests
import yaml

logger = logging.getLogger(__name__)

BUNDLED_CONFIG = "validators-config.yaml"


class ConfigLoader:
    """Loads the bundled settings file, optionally overlaid by a user file."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_path: Optional YAML file whose keys are merged over the
                bundled validators-config.yaml

        Raises:
            FileNotFoundError: If config_path does not exist
        """
        config_file = files("json_validators").joinpath(BUNDLED_CONFIG)
        with config_file.open("r") as f:
            self.config = yaml.safe_load(f) or {}
        self.config_path = config_path

        if config_path:
            override = self._load_yaml(config_path)
            self.config = _deep_merge(self.config, override)
            logger.info(f"Loaded validator settings override from {config_path}")

        self.cache_dir = Path(
            os.path.expanduser(self.get("schema_compiler", "cache_dir"))
        )

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """Read one setting, e.g. get("pattern", "whole_string")."""
        return self.config.get(section, {}).get(key, default)

    def get_pattern_whole_string(self) -> bool:
        return bool(self.get("pattern", "whole_string", False))

    def get_unknown_format_policy(self) -> str:
        policy = self.get("formats", "unknown", "allow")
        if policy not in ("allow", "error"):
            raise ValueError(
                f"formats.unknown must be 'allow' or 'error', got {policy!r}"
            )
        return policy

    def get_multiple_of_tolerance(self) -> float:
        return float(self.get("multiple_of", "tolerance", 1e-9))

    def get_check_schema(self) -> bool:
        return bool(self.get("schema_compiler", "check_schema", True))

    def get_remote_timeout(self) -> float:
        return float(self.get("remote", "timeout_seconds", 10))

    def _load_yaml(self, path: str) -> Dict[str, Any]:
        """Load YAML file from disk."""
        with open(path) as f:
            return yaml.safe_load(f) or {}

    def load_schema(self, uri: str, base_dir: Optional[str] = None) -> Any:
        """
        Load a schema document from a URI (with caching for remote ones).

        JSON documents parse as YAML, so both formats are accepted.

        Supports:
        - Relative paths - resolved against base_dir (default: cwd)
        - file:// - Local filesystem (absolute paths)
        - https:// / http:// - Remote, cached under schema_compiler.cache_dir

        Args:
            uri: Schema URI or path
            base_dir: Directory relative paths are resolved against

        Returns:
            Parsed schema document

        Raises:
            ValueError: If the URI scheme is unsupported
            RuntimeError: If a remote fetch fails
        """
        parsed = urllib.parse.urlparse(uri)

        if not parsed.scheme:
            path = os.path.join(base_dir or os.getcwd(), uri)
            return self._load_yaml(path)

        if parsed.scheme == "file":
            return self._load_yaml(urllib.parse.unquote(parsed.path))

        if parsed.scheme in ("http", "https"):
            cache_key = hashlib.sha256(uri.encode()).hexdigest()
            cache_path = self.cache_dir / f"schema_{cache_key}.yaml"

            if cache_path.exists():
                logger.debug(f"Using cached schema for {uri}")
                return self._load_yaml(str(cache_path))

            content = self._fetch_uri(uri)
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            cache_path.write_text(content)
            return yaml.safe_load(content)

        raise ValueError(f"Unsupported URI scheme: {parsed.scheme} in {uri}")

    def _fetch_uri(self, uri: str) -> str:
        """Fetch content from HTTP/HTTPS URI."""
        try:
            response = requests.get(uri, timeout=self.get_remote_timeout())
            response.raise_for_status()
            return response.text
        except requests.exceptions.RequestException as e:
            raise RuntimeError(f"Failed to fetch schema from {uri}: {e}") from e


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


_config: Optional[ConfigLoader] = None


def get_config(config_path: Optional[str] = None) -> ConfigLoader:
    """
    Get the process-wide ConfigLoader, creating it on first use.

    Passing config_path replaces the current instance.
    """
    global _config
    if _config is None or config_path is not None:
        _config = ConfigLoader(config_path)
    return _config


def reset_config() -> None:
    """Drop the process-wide ConfigLoader (useful in tests)."""
    global _config
    _config = None
