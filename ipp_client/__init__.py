"""HTTP transport and operation builders for the IPP codec."""

from .client import IppClient  # noqa: F401
from .config import set_config  # noqa: F401
from .operations import (  # noqa: F401
    PrinterSummary,
    cancel_job,
    cups_get_printers,
    get_jobs,
    get_printer_attributes,
    print_job,
    printer_summaries,
    printer_summary,
)

__all__ = [
    "IppClient",
    "PrinterSummary",
    "cancel_job",
    "cups_get_printers",
    "get_jobs",
    "get_printer_attributes",
    "print_job",
    "printer_summaries",
    "printer_summary",
    "set_config",
]
