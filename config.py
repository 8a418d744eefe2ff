"""Configuration loading for the MIDI resampler.

The config file is JSON or a small YAML subset (nested mappings, scalars,
inline ``[...]`` lists, ``#`` comments). Missing sections or keys are
filled from defaults with a warning, never an error.
"""

from __future__ import annotations

import ast
import copy
import json
import os
import warnings
from typing import Any, Dict, List, Optional, Tuple

__all__ = ["DEFAULT_CONFIG", "load_config_safe", "clear_config_cache"]

CONFIG_CACHE: Dict[str, Dict[str, Any]] = {}

_DEFAULT_RESAMPLE = {
    "multiplier": 1.0,
    "recompute_lengths": False,
}

_DEFAULT_LOGGING = {
    "level": "INFO",
}

_DEFAULT_PATHS = {
    "output": "./output",
}

DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    "resample": _DEFAULT_RESAMPLE,
    "logging": _DEFAULT_LOGGING,
    "paths": _DEFAULT_PATHS,
}


def _parse_scalar(token: str) -> Any:
    token = token.strip()
    if not token or token.lower() in {"null", "~"}:
        return None
    lowered = token.lower()
    if lowered in {"true", "yes"}:
        return True
    if lowered in {"false", "no"}:
        return False
    if len(token) >= 2 and token[0] == token[-1] and token[0] in "\"'":
        return token[1:-1]
    if token.startswith("[") and token.endswith("]"):
        try:
            return ast.literal_eval(token)
        except (ValueError, SyntaxError):
            return token
    try:
        if any(ch in token for ch in (".", "e", "E")):
            return float(token)
        return int(token)
    except ValueError:
        return token


def _load_yaml_like(text: str) -> Any:
    stripped = text.strip()
    if not stripped:
        return {}
    try:
        return json.loads(stripped)
    except json.JSONDecodeError:
        pass

    root: Dict[str, Any] = {}
    stack: List[Tuple[int, Dict[str, Any]]] = [(-1, root)]
    for raw in text.splitlines():
        trimmed = raw.split("#", 1)[0].rstrip()
        if not trimmed.strip():
            continue
        indent = len(trimmed) - len(trimmed.lstrip(" "))
        content = trimmed.strip()
        while len(stack) > 1 and indent <= stack[-1][0]:
            stack.pop()
        parent = stack[-1][1]

        key, sep, raw_val = content.partition(":")
        if not sep:
            raise ValueError(f"invalid YAML line: {content}")
        key = key.strip().strip("\"'")
        if raw_val.strip():
            parent[key] = _parse_scalar(raw_val)
        else:
            child: Dict[str, Any] = {}
            parent[key] = child
            stack.append((indent, child))
    return root


def _resolve_path(base_dir: str, value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    path = os.path.expanduser(str(value))
    if not os.path.isabs(path):
        path = os.path.abspath(os.path.join(base_dir, path))
    return path


def clear_config_cache() -> None:
    CONFIG_CACHE.clear()


def load_config_safe(path: str = "config.yaml", *, use_cache: bool = True) -> Dict[str, Any]:
    """Load the config, injecting defaults and caching the result."""

    abs_path = os.path.abspath(path)
    if use_cache and abs_path in CONFIG_CACHE:
        return copy.deepcopy(CONFIG_CACHE[abs_path])

    base_dir = os.path.dirname(abs_path)
    try:
        with open(abs_path, "r", encoding="utf-8") as f:
            cfg_raw = _load_yaml_like(f.read()) or {}
    except FileNotFoundError:
        warnings.warn(f"Config file '{path}' not found. Using defaults.")
        cfg_raw = {}

    if not isinstance(cfg_raw, dict):
        warnings.warn("Config must be a mapping. Using defaults.")
        cfg_raw = {}

    cfg: Dict[str, Any] = copy.deepcopy(cfg_raw)
    for key, defaults in DEFAULT_CONFIG.items():
        section = cfg.get(key)
        if not isinstance(section, dict):
            if key in cfg:
                warnings.warn(f"Section '{key}' is invalid; using defaults.")
            section = copy.deepcopy(defaults)
        else:
            for sub_key, default_value in defaults.items():
                section.setdefault(sub_key, copy.deepcopy(default_value))
        cfg[key] = section

    try:
        cfg["resample"]["multiplier"] = float(cfg["resample"]["multiplier"])
    except (TypeError, ValueError):
        warnings.warn("resample.multiplier is not a number; using 1.0.")
        cfg["resample"]["multiplier"] = _DEFAULT_RESAMPLE["multiplier"]
    cfg["resample"]["recompute_lengths"] = bool(cfg["resample"]["recompute_lengths"])
    cfg["paths"]["output"] = _resolve_path(base_dir, cfg["paths"]["output"])
    cfg["_base_dir"] = base_dir

    CONFIG_CACHE[abs_path] = copy.deepcopy(cfg)
    return cfg
