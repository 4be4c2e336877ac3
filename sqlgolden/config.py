from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from .canonicalize import DEFAULT_DIALECT
from .golden_file import DEFAULT_GOLDEN_DIR

DEFAULT_CONFIG_FILE = "sqlgolden.yaml"

_TRUTHY = {"1", "true", "yes", "on"}


class GoldenSettings(BaseModel):
    golden_dir: str = DEFAULT_GOLDEN_DIR
    dialect: str = DEFAULT_DIALECT
    update: bool = False
    order_sensitive: bool = True
    model_config = ConfigDict(extra="forbid")


def _load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file must contain a mapping: {path}")
    return data


def _env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if environ.get("SQLGOLDEN_DIR"):
        overrides["golden_dir"] = environ["SQLGOLDEN_DIR"]
    if environ.get("SQLGOLDEN_DIALECT"):
        overrides["dialect"] = environ["SQLGOLDEN_DIALECT"]
    if "SQLGOLDEN_UPDATE" in environ:
        overrides["update"] = environ["SQLGOLDEN_UPDATE"].strip().lower() in _TRUTHY
    return overrides


def load_settings(
    path: Optional[str | Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> GoldenSettings:
    """Build settings from an optional YAML file plus ``SQLGOLDEN_*`` environment overrides.

    An explicit *path* must exist; the default ``sqlgolden.yaml`` is optional.
    """

    environ = os.environ if environ is None else environ
    data: Dict[str, Any] = {}
    if path is not None:
        cfg_path = Path(path)
        if not cfg_path.exists():
            raise FileNotFoundError(f"Settings file not found: {cfg_path}")
    else:
        cfg_path = Path(DEFAULT_CONFIG_FILE)
    if cfg_path.exists():
        try:
            data = _load_yaml(cfg_path)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {cfg_path}: {exc}") from exc

    data.update(_env_overrides(environ))
    try:
        return GoldenSettings(**data)
    except ValidationError as exc:
        raise ValueError(f"Invalid sqlgolden settings: {exc}") from exc


__all__ = ["DEFAULT_CONFIG_FILE", "GoldenSettings", "load_settings"]
