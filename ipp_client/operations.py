"""Builders for common IPP operations and helpers to read their answers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from ipp_proto.attribute import IppAttributeGroup
from ipp_proto.errors import InvalidAttributeTypeError
from ipp_proto.request import IppRequestResponse
from ipp_proto.value import ArrayValue, boolean, integer, keyword, mime_media_type, name
from ipp_shared.constants import (
    DOCUMENT_FORMAT,
    IPP_VERSION_1_1,
    JOB_ID,
    JOB_NAME,
    REQUESTED_ATTRIBUTES,
    REQUESTING_USER_NAME,
    DelimiterTag,
    IppVersion,
    Operation,
    PrinterState,
)

_OP = DelimiterTag.OPERATION_ATTRIBUTES


def _requested_attributes(request: IppRequestResponse, requested: Optional[Iterable[str]]) -> None:
    values = [keyword(item) for item in requested or []]
    if len(values) == 1:
        request.add(_OP, REQUESTED_ATTRIBUTES, values[0])
    elif values:
        request.add(_OP, REQUESTED_ATTRIBUTES, ArrayValue(values))


def print_job(
    uri: str,
    payload: Any,
    user_name: Optional[str] = None,
    job_name: Optional[str] = None,
    document_format: Optional[str] = None,
    version: IppVersion = IPP_VERSION_1_1,
) -> IppRequestResponse:
    """Build a Print-Job request carrying ``payload`` as document data.

    Args:
        uri: Printer address.
        payload: Document source accepted by :class:`ipp_proto.payload.PayloadReader`.
        user_name: Value for ``requesting-user-name``.
        job_name: Value for ``job-name``.
        document_format: MIME type of the document, e.g. ``application/pdf``.
        version: Protocol version of the request.

    Returns:
        IppRequestResponse: Request ready to be sent.
    """
    request = IppRequestResponse.new_request(version, Operation.PRINT_JOB, uri)
    if user_name:
        request.add(_OP, REQUESTING_USER_NAME, name(user_name))
    if job_name:
        request.add(_OP, JOB_NAME, name(job_name))
    if document_format:
        request.add(_OP, DOCUMENT_FORMAT, mime_media_type(document_format))
    request.attach_payload(payload)
    return request


def get_printer_attributes(
    uri: str,
    requested: Optional[Iterable[str]] = None,
    version: IppVersion = IPP_VERSION_1_1,
) -> IppRequestResponse:
    """Build a Get-Printer-Attributes request, optionally limited to ``requested``."""
    request = IppRequestResponse.new_request(version, Operation.GET_PRINTER_ATTRIBUTES, uri)
    _requested_attributes(request, requested)
    return request


def get_jobs(
    uri: str,
    user_name: Optional[str] = None,
    which_jobs: Optional[str] = None,
    my_jobs: bool = False,
    version: IppVersion = IPP_VERSION_1_1,
) -> IppRequestResponse:
    """Build a Get-Jobs request (``which_jobs`` is ``completed`` or ``not-completed``)."""
    request = IppRequestResponse.new_request(version, Operation.GET_JOBS, uri)
    if user_name:
        request.add(_OP, REQUESTING_USER_NAME, name(user_name))
    if which_jobs:
        request.add(_OP, "which-jobs", keyword(which_jobs))
    if my_jobs:
        request.add(_OP, "my-jobs", boolean(True))
    return request


def cancel_job(
    uri: str,
    job_id: int,
    user_name: Optional[str] = None,
    version: IppVersion = IPP_VERSION_1_1,
) -> IppRequestResponse:
    """Build a Cancel-Job request for ``job_id`` on the printer at ``uri``."""
    request = IppRequestResponse.new_request(version, Operation.CANCEL_JOB, uri)
    request.add(_OP, JOB_ID, integer(job_id))
    if user_name:
        request.add(_OP, REQUESTING_USER_NAME, name(user_name))
    return request


def cups_get_printers(
    requested: Optional[Iterable[str]] = None,
    version: IppVersion = IPP_VERSION_1_1,
) -> IppRequestResponse:
    """Build a CUPS-Get-Printers request; the answer has one printer group per queue."""
    request = IppRequestResponse.new_request(version, Operation.CUPS_GET_PRINTERS)
    _requested_attributes(request, requested)
    return request


@dataclass
class PrinterSummary:
    """Name, device uri and state of one printer group."""

    name: str
    device_uri: str
    state: PrinterState


def printer_summary(group: IppAttributeGroup) -> PrinterSummary:
    """Extract the summary fields from a printer-attributes group.

    Raises:
        AttributeNotFoundError: If ``printer-name`` or ``printer-state`` is missing.
        InvalidAttributeTypeError: If ``printer-state`` is not a known enum value.
    """
    printer_name = str(group.get("printer-name").value)
    device = group.find("device-uri")
    raw_state = group.get("printer-state").value.as_enum()
    if raw_state is None:
        raise InvalidAttributeTypeError("printer-state is not an enum value")
    try:
        state = PrinterState(raw_state)
    except ValueError:
        raise InvalidAttributeTypeError(f"printer-state {raw_state} is not a known state") from None
    return PrinterSummary(printer_name, str(device.value) if device is not None else "", state)


def printer_summaries(response: IppRequestResponse) -> List[PrinterSummary]:
    """Return one summary per printer-attributes group of ``response``."""
    return [
        printer_summary(group)
        for group in response.attributes.groups_of(DelimiterTag.PRINTER_ATTRIBUTES)
    ]
