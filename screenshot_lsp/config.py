"""
Configuration for the screenshot language server.

Settings come from ``DEFAULT_CONFIG`` merged with an optional YAML or JSON
file found in the working directory or one of its parents.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

CONFIG_FILE_NAMES = [
    ".screenshot-lsp.yml",
    ".screenshot-lsp.yaml",
    "screenshot-lsp.yml",
    "screenshot-lsp.yaml",
]


class Config:
    """Configuration manager with dotted-key access."""

    DEFAULT_CONFIG: Dict[str, Any] = {
        "server": {
            "command": "npx",
            "args": ["-y", "@ai-capabilities-suite/mcp-screenshot"],
            "env": {},
            "settle_delay": 1.0,  # seconds before the first request is accepted
            "request_timeout": 30.0,
        },
        "analysis": {
            "debounce_delay": 0.1,
            "valid_formats": ["png", "jpeg", "webp"],
            "disabled_validators": [],
        },
        "capture": {
            "default_format": "png",
            "default_quality": 90,
            "enable_pii_masking": False,
        },
        "logging": {
            "level": "INFO",
            "file": False,
            "json_format": True,
        },
    }

    def __init__(self, config_dict: Optional[Dict] = None, source: Optional[Path] = None):
        """Initialize with optional config dictionary."""
        self.config = self._merge_configs(self.DEFAULT_CONFIG, config_dict or {})
        self.source = source

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Config":
        """Load configuration from a file."""
        path = Path(path)
        if not path.exists():
            return cls()

        with open(path, "r") as f:
            if path.suffix in [".yaml", ".yml"]:
                data = yaml.safe_load(f) or {}
            elif path.suffix == ".json":
                data = json.load(f)
            else:
                raise ValueError(f"Unsupported config format: {path.suffix}")

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return cls(data, source=path)

    @classmethod
    def find_and_load(cls, start_path: Union[str, Path] = ".") -> "Config":
        """Find and load configuration from standard locations."""
        current = Path(start_path).resolve()
        if current.is_file():
            current = current.parent

        while True:
            for name in CONFIG_FILE_NAMES:
                config_path = current / name
                if config_path.exists():
                    return cls.from_file(config_path)
            if current == current.parent:
                break
            current = current.parent

        return cls()

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "Config":
        """Load an explicit file, or search upward from the working directory."""
        if path:
            return cls.from_file(path)
        return cls.find_and_load(Path.cwd())

    def get(self, key: str, default=None):
        """Get configuration value by dot-separated key."""
        keys = key.split(".")
        value = self.config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def set(self, key: str, value):
        """Set configuration value by dot-separated key."""
        keys = key.split(".")
        config = self.config

        for k in keys[:-1]:
            if k not in config or not isinstance(config[k], dict):
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return copy.deepcopy(self.config)

    def transport_options(self) -> Dict[str, Any]:
        """Keyword arguments for ``ProcessTransport``."""
        server = self.config["server"]
        return {
            "command": server["command"],
            "args": list(server.get("args") or []),
            "env": {str(k): str(v) for k, v in (server.get("env") or {}).items()},
            "settle_delay": float(server.get("settle_delay", 1.0)),
            "request_timeout": float(server.get("request_timeout", 30.0)),
        }

    def analysis_options(self) -> Dict[str, Any]:
        """Keyword arguments for ``AnalysisEngine``."""
        analysis = self.config["analysis"]
        return {
            "debounce_delay": float(analysis.get("debounce_delay", 0.1)),
            "valid_formats": list(analysis.get("valid_formats") or []),
            "disabled_validators": list(analysis.get("disabled_validators") or []),
        }

    def capture_defaults(self) -> Dict[str, Any]:
        return dict(self.config["capture"])

    def validate(self) -> List[str]:
        """Check the configuration and return a list of problems."""
        issues = []

        if not self.get("server.command"):
            issues.append("server.command must be a non-empty string")
        if not isinstance(self.get("server.args", []), list):
            issues.append("server.args must be a list")

        for key in ("server.settle_delay", "server.request_timeout", "analysis.debounce_delay"):
            value = self.get(key)
            if not isinstance(value, (int, float)) or value < 0:
                issues.append(f"{key} must be a non-negative number, got {value!r}")

        if self.get("server.request_timeout", 0) == 0:
            issues.append("server.request_timeout must be greater than zero")

        formats = self.get("analysis.valid_formats", [])
        if not formats:
            issues.append("analysis.valid_formats must list at least one format")

        default_format = self.get("capture.default_format")
        if formats and default_format not in formats:
            issues.append(f"capture.default_format '{default_format}' is not a valid format")

        quality = self.get("capture.default_quality")
        if not isinstance(quality, int) or not 0 <= quality <= 100:
            issues.append(f"capture.default_quality must be between 0 and 100, got {quality!r}")

        return issues

    def _merge_configs(self, base: Dict, override: Dict) -> Dict:
        """Recursively merge configuration dictionaries."""
        result = copy.deepcopy(base)

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result


def create_default_config_file(path: Union[str, Path]) -> bool:
    """Write the default configuration as YAML. Returns False on failure."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(Config.DEFAULT_CONFIG, f, default_flow_style=False, sort_keys=False)
    except OSError:
        return False
    return True
