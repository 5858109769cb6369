"""
Lightweight configuration validation and normalization for grouptable.

Public API:
    validate_config(cfg: dict) -> dict

- Raises ConfigError with clear messages (field paths + constraints) on invalid input.
- Returns a **new** normalized dict; the input is not mutated.
"""
from __future__ import annotations
from typing import Any, Dict, List, Tuple

from grouptable.errors import ConfigError

__all__ = ["validate_config", "validate_config_verbose", "validate_config_api", "DEFAULTS"]


# ------------------------------
# Utilities
# ------------------------------

def _ensure_dict(x: Any) -> Dict[str, Any]:
    if isinstance(x, dict):
        return dict(x)
    if hasattr(x, "__dict__"):
        return dict(vars(x))
    return {}


def _coerce_bool(v: Any) -> bool | None:
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        s = v.strip().lower()
        if s in {"1", "true", "yes", "on"}:
            return True
        if s in {"0", "false", "no", "off"}:
            return False
    return None


def _coerce_int(v: Any) -> int | None:
    if isinstance(v, bool):
        return None
    try:
        i = int(v)
    except (TypeError, ValueError):
        return None
    if isinstance(v, float) and v != i:
        return None
    return i


# ------------------------------
# Defaults
# ------------------------------

DEFAULTS: Dict[str, Any] = {
    "probe": {
        "max_workers": 8,        # <= 1 runs probes sequentially
    },
    "logs": {
        "compaction_jsonl": False,
    },
}

ALLOWED_TOP = set(DEFAULTS)
ALLOWED_PROBE = set(DEFAULTS["probe"])
ALLOWED_LOGS = set(DEFAULTS["logs"])

# Pools above this size rarely help a probe and usually signal a typo.
_LARGE_POOL = 256


def _lev(a: str, b: str) -> int:
    """Tiny Levenshtein distance (edit distance) for did-you-mean suggestions."""
    la, lb = len(a), len(b)
    dp = list(range(lb + 1))
    for i, ca in enumerate(a, 1):
        prev = dp[0]
        dp[0] = i
        for j, cb in enumerate(b, 1):
            ins = dp[j] + 1
            dele = dp[j - 1] + 1
            sub = prev + (0 if ca == cb else 1)
            prev, dp[j] = dp[j], min(ins, dele, sub)
    return dp[-1]


def _suggest_key(bad: str, allowed: set[str]) -> str | None:
    """Return closest allowed key within distance <= 2, else None."""
    best_key, best_dist = None, 99
    for k in sorted(allowed):
        d = _lev(bad, k)
        if d < best_dist:
            best_key, best_dist = k, d
    return best_key if best_dist <= 2 else None


def _err(errors: List[str], path: str, msg: str) -> None:
    errors.append(f"{path} {msg}")


def _check_unknown(errors: List[str], prefix: str, section: Dict[str, Any], allowed: set[str]) -> None:
    for k in section:
        if k in allowed:
            continue
        path = f"{prefix}.{k}" if prefix else str(k)
        hint = _suggest_key(str(k), allowed)
        _err(errors, path, f"unknown key (did you mean '{hint}'?)" if hint else "unknown key")


# ------------------------------
# Main validator
# ------------------------------

def _validate_config_normalize_impl(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate and normalize a configuration dictionary.

    Returns a NEW dict with defaults merged and fields coerced.
    Raises ConfigError listing every problem found (stable order).
    """
    cfg_in = _ensure_dict(cfg)
    errors: List[str] = []

    _check_unknown(errors, "", cfg_in, ALLOWED_TOP)

    raw_probe = cfg_in.get("probe", {})
    raw_logs = cfg_in.get("logs", {})
    if raw_probe is None:
        raw_probe = {}
    if raw_logs is None:
        raw_logs = {}
    if not isinstance(raw_probe, dict):
        _err(errors, "probe", "must be a mapping")
        raw_probe = {}
    if not isinstance(raw_logs, dict):
        _err(errors, "logs", "must be a mapping")
        raw_logs = {}
    _check_unknown(errors, "probe", raw_probe, ALLOWED_PROBE)
    _check_unknown(errors, "logs", raw_logs, ALLOWED_LOGS)

    probe = dict(DEFAULTS["probe"])
    if "max_workers" in raw_probe:
        mw = _coerce_int(raw_probe["max_workers"])
        if mw is None:
            _err(errors, "probe.max_workers", "must be an integer")
        elif mw < 0:
            _err(errors, "probe.max_workers", "must be >= 0")
        else:
            probe["max_workers"] = mw

    logs = dict(DEFAULTS["logs"])
    if "compaction_jsonl" in raw_logs:
        b = _coerce_bool(raw_logs["compaction_jsonl"])
        if b is None:
            _err(errors, "logs.compaction_jsonl", "must be a boolean")
        else:
            logs["compaction_jsonl"] = b

    if errors:
        raise ConfigError("\n".join(errors))
    return {"probe": probe, "logs": logs}


def validate_config_verbose(cfg: Dict[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
    """Validate and normalize configuration, returning (normalized_cfg, warnings)."""
    normalized = _validate_config_normalize_impl(cfg)
    warnings: List[str] = []
    mw = normalized["probe"]["max_workers"]
    if mw > _LARGE_POOL:
        warnings.append(
            f"W[probe.max_workers]: {mw} threads requested; the pool is capped at the partition count anyway."
        )
    return normalized, warnings


def validate_config_api(cfg: Dict[str, Any]):
    """Non-raising form: (ok, errors, normalized_or_none)."""
    try:
        normalized = _validate_config_normalize_impl(cfg)
        return True, [], normalized
    except ConfigError as e:
        msg = str(e).strip()
        errs = msg.split("\n") if msg else ["invalid configuration"]
        return False, errs, None


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Return the normalized config dict or raise ConfigError."""
    return _validate_config_normalize_impl(cfg)
