"""Locate, interpolate and validate ``.healthscan.yaml``.

String values may reference the environment as ``${VAR}`` or
``${VAR:-default}``. A ``${VAR}`` whose variable is unset stays in the value
verbatim and is reported as an :class:`UnresolvedVar`; left unnoticed, an
unresolved ``backend.anon_key`` would be sent to the backend as the literal
bearer token.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from healthscan_admin.config.models import HealthScanConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".healthscan.yaml"
CONFIG_ENV_VAR = "HEALTHSCAN_CONFIG"

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


@dataclass(frozen=True)
class UnresolvedVar:
    """A ``${VAR}`` placeholder whose variable is not set."""

    field: str  # dotted path, e.g. "backend.anon_key"
    name: str

    def __str__(self) -> str:
        return f"{self.field} references unset environment variable {self.name}"


class UnresolvedEnvError(ValueError):
    """Raised by a strict load when any placeholder stayed unresolved."""

    def __init__(self, source: Path, unresolved: list[UnresolvedVar]) -> None:
        self.source = source
        self.unresolved = unresolved
        listed = "; ".join(str(u) for u in unresolved)
        super().__init__(f"Unresolved environment variables in {source}: {listed}")


def interpolate(data: Any, field: str = "") -> tuple[Any, list[UnresolvedVar]]:
    """Substitute environment references throughout *data*.

    Returns the substituted copy and every placeholder left unresolved, keyed by
    the dotted field path it was found under (list items as ``name[i]``).
    """
    unresolved: list[UnresolvedVar] = []

    def _sub(value: str, where: str) -> str:
        def _replace(match: re.Match[str]) -> str:
            name, sep, default = match.group(1).partition(":-")
            name = name.strip()
            if name in os.environ:
                return os.environ[name]
            if sep:
                return default
            unresolved.append(UnresolvedVar(where, name))
            return match.group(0)

        return _PLACEHOLDER.sub(_replace, value)

    def _walk(node: Any, where: str) -> Any:
        if isinstance(node, str):
            return _sub(node, where)
        if isinstance(node, dict):
            return {k: _walk(v, f"{where}.{k}" if where else str(k)) for k, v in node.items()}
        if isinstance(node, list):
            return [_walk(item, f"{where}[{i}]") for i, item in enumerate(node)]
        return node

    return _walk(data, field), unresolved


def has_placeholder(value: str) -> bool:
    """Whether *value* still contains a ``${VAR}`` reference."""
    return _PLACEHOLDER.search(value) is not None


def find_config_file(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default cwd) looking for .healthscan.yaml."""
    current = (start or Path.cwd()).resolve()
    for ancestor in [current, *current.parents]:
        candidate = ancestor / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def resolve_config_path(path: Path | None = None) -> Path:
    """Pick the config file: explicit *path*, then ``$HEALTHSCAN_CONFIG``, then a walk up from cwd."""
    if path is None and os.environ.get(CONFIG_ENV_VAR):
        path = Path(os.environ[CONFIG_ENV_VAR])
    config_path = path or find_config_file()
    if config_path is None or not config_path.is_file():
        raise FileNotFoundError(
            f"Could not find {config_path or CONFIG_FILENAME}. "
            f"Create one from .healthscan.yaml.example, set {CONFIG_ENV_VAR}, or pass --path."
        )
    return config_path


def read_config(path: Path | None = None) -> tuple[HealthScanConfig, list[UnresolvedVar]]:
    """Load the config together with the placeholders that could not be resolved."""
    config_path = resolve_config_path(path)
    raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid configuration in {config_path}: expected a mapping at the top level")
    data, unresolved = interpolate(raw)
    try:
        config = HealthScanConfig(**data)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration in {config_path}: {exc}") from exc
    return config, unresolved


def load_config(path: Path | None = None, *, strict: bool = False) -> HealthScanConfig:
    """Load and validate the config.

    Unresolved placeholders are logged as warnings, or raise
    :class:`UnresolvedEnvError` when *strict* is set.
    """
    config_path = resolve_config_path(path)
    config, unresolved = read_config(config_path)
    if unresolved:
        if strict:
            raise UnresolvedEnvError(config_path, unresolved)
        for var in unresolved:
            logger.warning("%s: %s", config_path, var)
    return config
