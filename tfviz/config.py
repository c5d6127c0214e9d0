"""
Run configuration: edge-direction switches, verbosity and rendering options.

Values come from an optional ``tfviz.yaml`` next to where tfviz runs, then
from command-line flags, which win.
"""
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_FILE = "tfviz.yaml"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class Config:
    ignore_ingress: bool = False
    ignore_egress: bool = False
    verbose: bool = False
    ignore_warnings: bool = False
    # directory holding ec2.png, db.png, alb.png, asg.png, internet.png
    icons_dir: Optional[str] = None

    def merged(self, **overrides: Any) -> "Config":
        """Return a copy with every override that is not None applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _from_mapping(data: Dict[str, Any]) -> Config:
    known = {f.name for f in fields(Config)}
    values = {}
    for key, val in data.items():
        key = str(key).replace("-", "_")
        if key not in known:
            continue
        if key == "icons_dir":
            values[key] = None if val is None else str(val)
        elif isinstance(val, bool):
            values[key] = val
        else:
            raise ConfigError(f"'{key}' must be true or false, got {val!r}")
    return Config(**values)


def load_config(path: Optional[str] = None) -> Config:
    """
    Load configuration from ``path`` (or ``tfviz.yaml`` in the working
    directory). A missing default file yields the default configuration;
    a missing explicit file is an error.
    """
    config_file = path or DEFAULT_CONFIG_FILE
    if not os.path.exists(config_file):
        if path:
            raise ConfigError(f"config file {path} does not exist")
        return Config()

    try:
        with open(config_file, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"failed to read {config_file}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{config_file} must contain a mapping")
    return _from_mapping(data)
