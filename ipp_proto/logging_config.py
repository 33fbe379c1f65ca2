"""Logging setup helpers for the IPP codec and client."""

from __future__ import annotations

import logging
import os
import sys

# Codec logger; the client logs under ``ipp_client``.
log = logging.getLogger("ipp_proto")

# Longest prefix of a buffer rendered by ``hex_preview``.
HEX_PREVIEW_LIMIT = 64


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """Install a stdout handler and set the level for the IPP loggers.

    Args:
        level: Optional log level (e.g. ``"DEBUG"`` or ``logging.INFO``). If
            omitted, ``LOG_LEVEL`` from the environment is used and falls back
            to ``INFO`` when unset or invalid.

    Returns:
        logging.Logger: The codec logger.
    """
    resolved_level = _coerce_level(level)

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s")
        )
        root.addHandler(handler)
    root.setLevel(resolved_level)

    # httpx reports every request line at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    for name in ("ipp_proto", "ipp_client"):
        logging.getLogger(name).setLevel(resolved_level)

    log.debug("Logging configured at level %s", logging.getLevelName(resolved_level))
    return log


def hex_preview(data: bytes, limit: int = HEX_PREVIEW_LIMIT) -> str:
    """Render the start of ``data`` as hex for debug messages.

    Args:
        data: Buffer to render.
        limit: Maximum number of bytes shown.

    Returns:
        str: Hex digits, suffixed with the total size when truncated.
    """
    if len(data) <= limit:
        return data.hex()
    return f"{data[:limit].hex()}... ({len(data)} bytes)"


def _coerce_level(level: str | int | None) -> int:
    """Return a numeric logging level from user input or environment."""
    candidate = level if level is not None else os.getenv("LOG_LEVEL", "INFO")

    if isinstance(candidate, int):
        return candidate

    if isinstance(candidate, str):
        numeric = logging.getLevelName(candidate.upper())
        if isinstance(numeric, int):
            return numeric

    return logging.INFO
