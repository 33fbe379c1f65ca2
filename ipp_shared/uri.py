"""Helpers for translating between ipp:// printer addresses and HTTP URLs.

Printers are addressed as ``ipp://`` (or ``ipps://``) even though the bytes
travel over HTTP. The codec needs the former in ``printer-uri`` attributes and
the transport needs the latter to open a connection.
"""

from __future__ import annotations

from urllib.parse import urlsplit, urlunsplit

from .constants import IPP_DEFAULT_PORT

_HTTP_SCHEMES = {"ipp": "http", "ipps": "https"}


def normalize_printer_uri(uri: str) -> str:
    """Return ``uri`` with an ``http``/``https`` scheme replaced by ``ipp``/``ipps``.

    Args:
        uri: Printer address as supplied by the caller.

    Returns:
        str: ``ipp://`` / ``ipps://`` form; other schemes are returned unchanged.
    """
    parts = urlsplit(uri)
    scheme = parts.scheme.lower()
    if scheme not in ("http", "https"):
        return uri
    return urlunsplit(parts._replace(scheme="ipp" + scheme[4:]))


def to_http_url(uri: str) -> str:
    """Return the HTTP URL a request for ``uri`` must be posted to.

    Args:
        uri: ``ipp``, ``ipps``, ``http`` or ``https`` address.

    Returns:
        str: URL with an ``http``/``https`` scheme. IPP addresses without an
        explicit port get the IPP default port.

    Raises:
        ValueError: If the scheme is not one of the supported ones.
    """
    parts = urlsplit(uri)
    scheme = parts.scheme.lower()
    if scheme in ("http", "https"):
        return uri
    if scheme not in _HTTP_SCHEMES:
        raise ValueError(f"Unsupported printer uri scheme '{parts.scheme}'")
    if not parts.hostname:
        raise ValueError(f"Printer uri '{uri}' has no host")
    netloc = parts.netloc
    if parts.port is None:
        netloc = f"{netloc}:{IPP_DEFAULT_PORT}"
    return urlunsplit((_HTTP_SCHEMES[scheme], netloc, parts.path or "/", parts.query, ""))


__all__ = ["normalize_printer_uri", "to_http_url"]
