"""Load cart-manager configuration files.

YAML (``.yaml`` / ``.yml``) and JSON (``.json``) files are supported.
The loaded tree is validated before it is returned.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from cartmanager.config.schema import validate_config
from cartmanager.errors import ConfigurationError

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = frozenset({".yaml", ".yml"})


def parse_config(text: str, fmt: str = "yaml") -> dict[str, Any]:
    """Parse configuration text in the given format.

    Parameters
    ----------
    text:
        The raw file contents.
    fmt:
        ``"yaml"`` or ``"json"``.

    Returns
    -------
    dict[str, Any]
        The validated configuration tree. An empty document yields an
        empty dict.

    Raises
    ------
    ConfigurationError
        If the text cannot be parsed or the tree is malformed.
    """
    if fmt == "json":
        try:
            data = json.loads(text) if text.strip() else {}
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"invalid JSON configuration: {exc}") from exc
    elif fmt == "yaml":
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"invalid YAML configuration: {exc}") from exc
        if data is None:
            data = {}
    else:
        raise ConfigurationError(f"unsupported configuration format: {fmt!r}")

    validate_config(data)
    return data


def load_config(path: str | Path) -> dict[str, Any]:
    """Read and validate a configuration file.

    The format is chosen from the file extension; anything other than
    ``.json`` is read as YAML.

    Raises
    ------
    ConfigurationError
        If the file cannot be read or its contents are invalid.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"cannot read configuration file {str(path)!r}: {exc}") from exc

    fmt = "json" if path.suffix.lower() == ".json" else "yaml"
    if fmt == "yaml" and path.suffix.lower() not in _YAML_SUFFIXES:
        logger.debug("Unknown config extension %r; reading %s as YAML", path.suffix, path)
    return parse_config(text, fmt)
