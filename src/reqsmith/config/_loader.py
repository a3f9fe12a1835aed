# pyright: reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false, reportExplicitAny=false
"""Raw configuration sources.

Everything here works on plain nested dicts. Validation into typed settings
happens afterwards in the models, so the helpers stay ignorant of which keys
exist.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

import orjson

from reqsmith.exceptions import ConfigLoadError

__all__ = [
    "copy_value",
    "deep_merge",
    "parse_env_vars",
    "read_toml_file",
    "set_nested_key",
]

ENV_PREFIX = "REQSMITH_"
_ENV_SEPARATOR = "__"


def read_toml_file(path: Path) -> dict[str, Any]:
    """Load a TOML settings file into a dict.

    Raises:
        FileNotFoundError: If nothing exists at `path`.
        ConfigLoadError: If the file is not valid TOML. Line and column are
            filled in when the parser reports them.
    """
    try:
        with path.open("rb") as fp:
            return tomllib.load(fp)
    except tomllib.TOMLDecodeError as e:
        msg = f"Failed to parse TOML file {path}: {e}"
        raise ConfigLoadError(
            msg,
            path=path,
            line=getattr(e, "lineno", None),
            column=getattr(e, "colno", None),
        ) from e


def copy_value(value: Any) -> Any:
    """Copy nested dicts and lists; anything else is returned as is."""
    match value:
        case dict():
            return {key: copy_value(item) for key, item in value.items()}
        case list():
            return [copy_value(item) for item in value]
        case _:
            return value


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return `base` overlaid with `override`, leaving both untouched.

    Tables merge key by key. Any other value in `override`, lists included,
    replaces the one in `base` wholesale.
    """
    merged = copy_value(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy_value(value)
    return merged


def set_nested_key(d: dict[str, Any], key_path: str, value: Any) -> None:
    """Store `value` under a dotted path such as ``"codec.indent"``.

    Missing tables along the path are created, and a scalar sitting where a
    table is needed is replaced by one.
    """
    *tables, leaf = key_path.split(".")
    target = d
    for name in tables:
        child = target.get(name)
        if not isinstance(child, dict):
            child = target[name] = {}
        target = child
    target[leaf] = value


def _parse_env_value(value: str) -> Any:
    """Interpret an environment string as a TOML-like scalar.

    ``true``/``false`` in any case become booleans, integer and decimal
    literals become numbers, and bracketed text is tried as JSON. Whatever
    is left stays a string.
    """
    if value.lower() in {"true", "false"}:
        return value.lower() == "true"
    try:
        return int(value)
    except ValueError:
        pass
    if "." in value:
        try:
            return float(value)
        except ValueError:
            pass
    if value[:1] in {"[", "{"}:
        try:
            return orjson.loads(value)
        except orjson.JSONDecodeError:
            return value
    return value


def parse_env_vars(prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """Collect settings from ``<prefix><SECTION>__<KEY>`` variables.

    ``REQSMITH_DOCUMENT__CASCADE_DELETES=true`` becomes
    ``{"document": {"cascade_deletes": True}}``. Variables without a double
    underscore after the prefix, like ``REQSMITH_DEBUG``, are switches read
    elsewhere and are skipped.
    """
    settings: dict[str, Any] = {}
    for name, raw in os.environ.items():
        key = name.removeprefix(prefix)
        if key == name or _ENV_SEPARATOR not in key:
            continue
        path = key.lower().replace(_ENV_SEPARATOR, ".")
        set_nested_key(settings, path, _parse_env_value(raw))
    return settings
