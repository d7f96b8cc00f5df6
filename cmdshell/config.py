#!/usr/bin/env python3
# cmdshell/config.py
from __future__ import annotations

"""
Configuration loader (stdlib-only).

Precedence (low → high):
  1) Built-in defaults
  2) Files in CWD: .env, config.ini, config.json, config.toml
  3) Environment variables prefixed CMDSHELL_ (CMDSHELL_PROMPT, ...)

Keys may carry the CMDSHELL_ prefix in files too; it is stripped.

Validation:
  - APP_NAME / PROMPT: None or str
  - HISTORY_FILE / LOG_FILE_PATH: None or normalized path
  - HISTORY_MAX: int >= 0
  - DEBUG_COMPLETE: int 0..4
  - BLANK_REPEATS_CMD / KEEP_QUOTES / ENABLE_COMPLETION / SHOW_BOOT: bool
  - TOKEN_CHARS: str (may be empty)
  - LOG_LEVEL: None or one of {'DEBUG','INFO','WARNING','ERROR','CRITICAL'}
  - PLUGIN_PACKAGE: dotted module name
"""

from dataclasses import dataclass, field
from typing import Any, Mapping
from pathlib import Path
import configparser
import json
import os
import re
import tomllib  # stdlib in 3.11+

ENV_PREFIX = "CMDSHELL_"

# ---------- defaults ----------

DEFAULTS: dict[str, Any] = {
    "APP_NAME": None,
    "PROMPT": None,
    "HISTORY_FILE": "~/.cmdshell_history",
    "HISTORY_MAX": 64,
    "BLANK_REPEATS_CMD": False,
    "TOKEN_CHARS": "",
    "KEEP_QUOTES": False,
    "DEBUG_COMPLETE": 0,
    "LOG_LEVEL": None,              # 'DEBUG'/'INFO'/'WARNING'/'ERROR'/'CRITICAL'
    "LOG_FILE_PATH": None,
    "PLUGIN_PACKAGE": "cmdshell.plugins",
    "ENABLE_COMPLETION": True,
    "SHOW_BOOT": True,
}


# ---------- data model ----------

@dataclass(frozen=True)
class ShellConfig:
    app_name: str | None = None
    prompt: str | None = None
    history_file: Path | None = None
    history_max: int = 64
    blank_repeats_cmd: bool = False
    token_chars: str = ""
    keep_quotes: bool = False
    debug_complete: int = 0
    log_level: str | None = None
    log_file_path: Path | None = None
    plugin_package: str = "cmdshell.plugins"
    enable_completion: bool = True
    show_boot: bool = True

    # Unrecognized keys preserved for debugging/forward-compat
    extra: dict[str, Any] = field(default_factory=dict)


# ---------- file loaders (stdlib) ----------

def _load_env_file(path: Path) -> dict[str, str]:
    """Very small .env parser: KEY=VALUE, supports quotes; ignores comments/blank lines."""
    out: dict[str, str] = {}
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return out

    line_re = re.compile(r"""^\s*([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*?)\s*$""")
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        m = line_re.match(line)
        if not m:
            continue
        k, v = m.group(1), m.group(2)
        if len(v) >= 2 and v[0] == v[-1] and v[0] in "'\"":
            v = v[1:-1]
        out[k] = v
    return out


def _load_ini_file(path: Path) -> dict[str, str]:
    # No interpolation: prompts and token characters may contain '%'.
    cfg = configparser.ConfigParser(interpolation=None)
    try:
        cfg.read(path, encoding="utf-8")
    except configparser.Error:
        return {}
    flat: dict[str, str] = {}
    for sec in cfg.sections():
        for k, v in cfg.items(sec):
            flat[k.upper()] = v
    return flat


def _load_json_file(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def _load_toml_file(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        return {}


def _flatten_mapping(obj: Any, prefix: str = "") -> dict[str, Any]:
    """
    Flatten nested dicts to UPPER_SNAKE keys.
    Example: {'history': {'max': 10}} -> {'HISTORY_MAX': 10}
    We accept both flat and nested styles; flat keys win on collisions later.
    """
    flat: dict[str, Any] = {}
    if isinstance(obj, Mapping):
        for k, v in obj.items():
            key = f"{prefix}_{k}" if prefix else str(k)
            if isinstance(v, Mapping):
                flat.update(_flatten_mapping(v, key))
            else:
                flat[str(key).upper()] = v
    return flat


def _find_config_files(base: Path | None = None) -> list[Path]:
    cwd = base or Path.cwd()
    return [
        cwd / ".env",
        cwd / "config.ini",
        cwd / "config.json",
        cwd / "config.toml",
    ]


# ---------- normalization & coercion ----------

_BOOL_TRUE = {"1", "true", "yes", "y", "on"}
_BOOL_FALSE = {"0", "false", "no", "n", "off"}


def _as_bool(val: Any) -> bool:
    if isinstance(val, bool):
        return val
    s = str(val).strip().lower()
    if s in _BOOL_TRUE:
        return True
    if s in _BOOL_FALSE:
        return False
    raise ValueError(f"Expected boolean, got: {val!r}")


def _as_int(val: Any) -> int:
    if isinstance(val, int) and not isinstance(val, bool):
        return val
    try:
        return int(str(val).strip())
    except ValueError as exc:
        raise ValueError(f"Expected integer, got: {val!r}") from exc


def _as_opt_str(val: Any) -> str | None:
    return None if val is None or str(val).strip().lower() in {"", "none"} else str(val)


def _as_log_level(val: Any) -> str | None:
    lv = _as_opt_str(val)
    if lv is None:
        return None
    up = lv.upper()
    allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if up not in allowed:
        raise ValueError(
            f"LOG_LEVEL must be one of {sorted(allowed)}, got {lv!r}")
    return up


def _as_opt_path(val: Any) -> Path | None:
    v = _as_opt_str(val)
    if v is None:
        return None
    # expand both ~ and env vars
    return Path(os.path.expandvars(os.path.expanduser(v))).resolve()


# ---------- merge & load ----------

def _normalize_keys(d: Mapping[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for k, v in d.items():
        key = str(k).upper()
        if key.startswith(ENV_PREFIX):
            key = key[len(ENV_PREFIX):]
        out[key] = v
    return out


def _merge_sources(base: Path | None = None,
                   environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    merged: dict[str, Any] = dict(DEFAULTS)

    for file in _find_config_files(base):
        if file.name == ".env":
            merged.update(_normalize_keys(_load_env_file(file)))
        elif file.suffix == ".ini":
            merged.update(_normalize_keys(_load_ini_file(file)))
        elif file.suffix == ".json":
            merged.update(_normalize_keys(
                _flatten_mapping(_load_json_file(file))))
        elif file.suffix == ".toml":
            merged.update(_normalize_keys(
                _flatten_mapping(_load_toml_file(file))))

    # Environment variables override all; only our prefixed keys
    env = os.environ if environ is None else environ
    merged.update(_normalize_keys(
        {k: v for k, v in env.items() if k.startswith(ENV_PREFIX)}))
    return merged


# ---------- validation ----------

def _validate_and_build(config: Mapping[str, Any]) -> ShellConfig:
    def get(key: str) -> Any:
        return config.get(key, DEFAULTS[key])

    history_max = _as_int(get("HISTORY_MAX"))
    debug_complete = _as_int(get("DEBUG_COMPLETE"))
    plugin_package = _as_opt_str(get("PLUGIN_PACKAGE")) or DEFAULTS["PLUGIN_PACKAGE"]

    # --- constraints ---
    if history_max < 0:
        raise ValueError("HISTORY_MAX must be >= 0")
    if not 0 <= debug_complete <= 4:
        raise ValueError("DEBUG_COMPLETE must be between 0 and 4")
    if not re.fullmatch(r"[A-Za-z_][\w]*(\.[A-Za-z_][\w]*)*", plugin_package):
        raise ValueError(f"PLUGIN_PACKAGE must be a dotted module name, got {plugin_package!r}")

    token_chars = get("TOKEN_CHARS")
    token_chars = "" if token_chars is None else str(token_chars)

    # Carry through extra keys
    extra = {k: v for k, v in config.items() if k not in DEFAULTS}

    return ShellConfig(
        app_name=_as_opt_str(get("APP_NAME")),
        prompt=_as_opt_str(get("PROMPT")),
        history_file=_as_opt_path(get("HISTORY_FILE")),
        history_max=history_max,
        blank_repeats_cmd=_as_bool(get("BLANK_REPEATS_CMD")),
        token_chars=token_chars,
        keep_quotes=_as_bool(get("KEEP_QUOTES")),
        debug_complete=debug_complete,
        log_level=_as_log_level(get("LOG_LEVEL")),
        log_file_path=_as_opt_path(get("LOG_FILE_PATH")),
        plugin_package=plugin_package,
        enable_completion=_as_bool(get("ENABLE_COMPLETION")),
        show_boot=_as_bool(get("SHOW_BOOT")),
        extra=extra,
    )


def load_config(base: Path | None = None,
                environ: Mapping[str, str] | None = None) -> ShellConfig:
    """
    Merge every source and validate the result.

    `base` (default: CWD) is where config files are looked up; `environ`
    (default: os.environ) supplies the overrides. Raises ValueError on bad values.
    """
    return _validate_and_build(_merge_sources(base, environ))
