"""
Configuration Loader - YAML Hook Definitions with Validation.

Loads hook configurations from YAML files and validates the envelope
using Pydantic. A file may either hold the full envelope

    version: "1.0"
    hooks:
      before: {...}

or just the stage map (`before:` / `after:` at top level), which is
wrapped automatically.

Overlay files (for instance an environment specific `hooks.prod.yaml`)
are deep-merged over the base definitions, so they can switch options
of single steps without repeating the whole pipeline.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

import yaml

from hook_pipeline.config.models import HooksConfig

logger = logging.getLogger(__name__)

_ENVELOPE_KEYS = {"version", "hooks"}


class ConfigLoader:
    """Loads and validates hook configurations from YAML files."""

    def __init__(self, base_path: Optional[Path] = None) -> None:
        """
        Initialize config loader.

        Args:
            base_path: Base path for relative config paths
        """
        self._base_path = base_path or Path(".")

    def load(
        self,
        config_path: Union[str, Path],
        overlays: Iterable[Union[str, Path]] = (),
    ) -> HooksConfig:
        """
        Load a hook configuration file.

        Args:
            config_path: Path to the YAML file
            overlays: Files deep-merged over it, in order

        Returns:
            Validated HooksConfig object

        Raises:
            FileNotFoundError: If a file doesn't exist
            ValidationError: If the envelope is invalid
            ValueError: If a file does not hold a mapping
        """
        config_dict = self._normalize(self._load_yaml(self._resolve_path(config_path)))
        for overlay in overlays:
            overlay_dict = self._normalize(self._load_yaml(self._resolve_path(overlay)))
            config_dict = merge_configs(config_dict, overlay_dict)
            logger.debug(f"Merged hook overlay {overlay}")

        return HooksConfig.model_validate(config_dict)

    def load_from_dict(self, config_dict: Dict[str, Any]) -> HooksConfig:
        """
        Load configuration from a dictionary.

        Args:
            config_dict: Envelope or bare stage map

        Returns:
            Validated HooksConfig object
        """
        return HooksConfig.model_validate(self._normalize(config_dict))

    def _resolve_path(self, path: Union[str, Path]) -> Path:
        p = Path(path)
        if p.is_absolute():
            return p
        return self._base_path / p

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)
        if content is None:
            return {}
        if not isinstance(content, dict):
            raise ValueError(
                f"Hook configuration {path} must hold a mapping, "
                f"got {type(content).__name__}"
            )
        logger.debug(f"Loaded hook configuration from {path}")
        return content

    def _normalize(self, config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Wrap a bare stage map into the envelope."""
        if not config_dict or set(config_dict) & _ENVELOPE_KEYS:
            return dict(config_dict)
        return {"hooks": dict(config_dict)}


def merge_configs(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge overlay into base.

    Mappings are merged key by key; any other overlay value, lists
    included, replaces the base value.
    """
    result = dict(base)
    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value
    return result


def load_config(
    config_path: Union[str, Path],
    overlays: Iterable[Union[str, Path]] = (),
    base_path: Optional[Path] = None,
) -> HooksConfig:
    """
    Convenience function to load a hook configuration.

    Args:
        config_path: Path to the YAML file
        overlays: Files deep-merged over it
        base_path: Base path for resolving relative paths

    Returns:
        Validated HooksConfig object
    """
    loader = ConfigLoader(base_path=base_path)
    return loader.load(config_path, overlays)
