from __future__ import annotations
from typing import Any, Dict
import logging
import os

import yaml

from configs.validate import validate_config
from ..engine.types import Config
from ..errors import ConfigError

logger = logging.getLogger(__name__)

ENV_PROBE_WORKERS = "GROUPTABLE_PROBE_WORKERS"


# ---- small helpers --------------------------------------------------------

def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge env overrides into a raw config dict (no effect if env vars absent).
    Supported:
      - GROUPTABLE_PROBE_WORKERS=<int>  -> probe.max_workers
    """
    v = os.getenv(ENV_PROBE_WORKERS)
    if v is None or not v.strip():
        return data
    out = dict(data)
    probe = dict(out.get("probe") or {})
    probe["max_workers"] = v.strip()
    out["probe"] = probe
    return out


def config_from_dict(data: Dict[str, Any]) -> Config:
    normalized = validate_config(data)
    return Config(probe=normalized["probe"], logs=normalized["logs"])


# ---- loader ---------------------------------------------------------------

def load_config(path: str | None = None) -> Config:
    """
    Load a YAML config if a path is given; otherwise start from defaults.
    Env overrides are applied on top, then the result is validated.
    A missing file yields defaults; a malformed one raises ConfigError.
    """
    data: Dict[str, Any] = {}
    if path:
        try:
            with open(path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except FileNotFoundError:
            logger.debug("config file %s not found; using defaults", path)
            loaded = None
        except yaml.YAMLError as e:
            raise ConfigError(f"{path}: invalid YAML: {e}") from e
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigError(f"{path}: top level must be a mapping")
        data = loaded or {}
    return config_from_dict(_apply_env_overrides(data))
