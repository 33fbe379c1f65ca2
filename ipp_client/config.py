"""Client configuration from an optional YAML file overlaid with environment variables."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict

import yaml

log = logging.getLogger("ipp_client")

DEFAULTS: Dict[str, Any] = {
    "uri": "ipp://localhost:631/",
    "username": None,
    "password": None,
    "timeout": 30.0,
    "verify_tls": True,
}

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def set_config(path: str | Path = "config.yaml") -> Dict[str, Any]:
    """Build client configuration from ``path`` overlaid with environment variables.

    Recognised variables: ``IPP_URI``, ``IPP_USERNAME``, ``IPP_PASSWORD``,
    ``IPP_TIMEOUT`` and ``IPP_VERIFY_TLS``.

    Args:
        path: YAML file with a mapping of the keys in ``DEFAULTS``. A missing
            or invalid file is ignored.

    Returns:
        dict: Configuration with every key of ``DEFAULTS`` present.
    """
    path = Path(path)
    cfg: Dict[str, Any] = dict(DEFAULTS)

    try:
        if path.exists():
            with path.open("r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
            if not isinstance(data, dict):
                log.warning("Config file %s does not contain a mapping", path)
            else:
                cfg.update({key: value for key, value in data.items() if key in DEFAULTS})
    except (OSError, yaml.YAMLError) as exc:
        log.warning("Failed to load config from %s: %s", path, exc)

    # Environment variables override config.yaml values
    for key in ("uri", "username", "password"):
        value = os.getenv(f"IPP_{key.upper()}")
        if value:
            cfg[key] = value

    timeout = os.getenv("IPP_TIMEOUT")
    if timeout:
        try:
            cfg["timeout"] = float(timeout)
        except ValueError:
            log.warning("Invalid IPP_TIMEOUT value '%s', keeping %s", timeout, cfg["timeout"])

    verify = os.getenv("IPP_VERIFY_TLS")
    if verify:
        lowered = verify.strip().lower()
        if lowered in _TRUE_VALUES:
            cfg["verify_tls"] = True
        elif lowered in _FALSE_VALUES:
            cfg["verify_tls"] = False
        else:
            log.warning("Invalid IPP_VERIFY_TLS value '%s', ignoring", verify)

    log.info("Configuration loaded: %s", _mask_sensitive(cfg))
    return cfg


def _mask_sensitive(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of config data with password values masked."""
    return {key: _mask_sensitive_value(key, value) for key, value in data.items()}


def _mask_sensitive_value(key: str, value: Any) -> Any:
    if isinstance(value, str) and _is_sensitive_key(key):
        if len(value) <= 6:
            return f"{value[:1]}***{value[-1:]}"
        return f"{value[:3]}***{value[-3:]}"
    return value


def _is_sensitive_key(key: str) -> bool:
    """Return True if the key name indicates sensitive content."""
    key_lower = key.lower()
    return any(token in key_lower for token in ("password", "secret", "token"))
