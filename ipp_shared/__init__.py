"""Shared exports for the IPP codec and client."""

from .constants import (  # noqa: F401
    ATTRIBUTES_CHARSET,
    ATTRIBUTES_NATURAL_LANGUAGE,
    DEFAULT_CHARSET,
    DEFAULT_NATURAL_LANGUAGE,
    IPP_VERSION_1_0,
    IPP_VERSION_1_1,
    IPP_VERSION_2_0,
    IPP_VERSION_2_1,
    IPP_VERSION_2_2,
    PRINTER_URI,
    DelimiterTag,
    IppVersion,
    JobState,
    Operation,
    PrinterState,
    StatusCode,
    ValueTag,
)
from .uri import normalize_printer_uri, to_http_url  # noqa: F401

__all__ = [
    "ATTRIBUTES_CHARSET",
    "ATTRIBUTES_NATURAL_LANGUAGE",
    "DEFAULT_CHARSET",
    "DEFAULT_NATURAL_LANGUAGE",
    "IPP_VERSION_1_0",
    "IPP_VERSION_1_1",
    "IPP_VERSION_2_0",
    "IPP_VERSION_2_1",
    "IPP_VERSION_2_2",
    "PRINTER_URI",
    "DelimiterTag",
    "IppVersion",
    "JobState",
    "Operation",
    "PrinterState",
    "StatusCode",
    "ValueTag",
    "normalize_printer_uri",
    "to_http_url",
]
