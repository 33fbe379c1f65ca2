import pytest

from ipp_client.operations import (
    PrinterSummary,
    cancel_job,
    cups_get_printers,
    get_jobs,
    get_printer_attributes,
    print_job,
    printer_summaries,
)
from ipp_proto import protocol
from ipp_proto.attribute import IppAttribute
from ipp_proto.errors import AttributeNotFoundError, InvalidAttributeTypeError
from ipp_proto.request import build_response
from ipp_proto.value import enum, integer, keyword, name, uri
from ipp_shared.constants import IPP_VERSION_1_1, DelimiterTag, Operation, PrinterState, StatusCode

_OP = DelimiterTag.OPERATION_ATTRIBUTES


def _operation_group(request):
    return request.attributes.groups_of(_OP).first()


def test_print_job_carries_document_attributes_and_payload():
    """Print-Job puts job metadata in the operation group and keeps the payload.

    Returns:
        None
    """
    request = print_job(
        "http://host/printers/p1",
        b"data",
        user_name="alice",
        job_name="report.pdf",
        document_format="application/pdf",
    )
    group = _operation_group(request)

    assert request.header.operation == Operation.PRINT_JOB
    assert group.names() == [
        "attributes-charset",
        "attributes-natural-language",
        "printer-uri",
        "requesting-user-name",
        "job-name",
        "document-format",
    ]
    assert group.get("printer-uri").value.as_string() == "ipp://host/printers/p1"
    assert group.get("document-format").value.as_string() == "application/pdf"
    assert request.payload is not None


def test_get_printer_attributes_requested_list_is_one_multi_valued_attribute():
    request = get_printer_attributes("ipp://host/", ["printer-name", "printer-state"])
    requested = _operation_group(request).get("requested-attributes").value
    assert [item.as_string() for item in requested] == ["printer-name", "printer-state"]

    decoded = protocol.decode(request.to_bytes())
    assert decoded.attributes.groups == request.attributes.groups
    assert "requested-attributes" not in _operation_group(get_printer_attributes("ipp://host/"))


def test_get_jobs_and_cancel_job_attributes():
    jobs = _operation_group(get_jobs("ipp://host/", user_name="bob", which_jobs="completed", my_jobs=True))
    assert jobs.get("which-jobs").value == keyword("completed")
    assert jobs.get("my-jobs").value.as_boolean() is True

    cancel = cancel_job("ipp://host/printers/p1", 12)
    assert cancel.header.operation == Operation.CANCEL_JOB
    assert _operation_group(cancel).get("job-id").value == integer(12)


def test_cups_get_printers_has_no_printer_uri():
    request = cups_get_printers(["printer-name"])
    assert request.header.operation == Operation.CUPS_GET_PRINTERS
    assert "printer-uri" not in _operation_group(request)


def _printers_response(*printers):
    response = build_response(IPP_VERSION_1_1, StatusCode.SUCCESSFUL_OK, 1)
    for attributes in printers:
        group = response.attributes.add_group(DelimiterTag.PRINTER_ATTRIBUTES)
        for attr_name, value in attributes:
            response.attributes.add(group.tag, IppAttribute(attr_name, value))
    return protocol.decode(response.to_bytes())


def test_printer_summaries_one_per_group():
    """Each printer-attributes group yields one summary in order.

    Returns:
        None
    """
    response = _printers_response(
        [("printer-name", name("p1")), ("device-uri", uri("usb://one")), ("printer-state", enum(3))],
        [("printer-name", name("p2")), ("printer-state", enum(5))],
    )
    assert printer_summaries(response) == [
        PrinterSummary("p1", "usb://one", PrinterState.IDLE),
        PrinterSummary("p2", "", PrinterState.STOPPED),
    ]


def test_printer_summary_rejects_bad_state():
    wrong_type = _printers_response([("printer-name", name("p1")), ("printer-state", integer(3))])
    with pytest.raises(InvalidAttributeTypeError):
        printer_summaries(wrong_type)

    unknown = _printers_response([("printer-name", name("p1")), ("printer-state", enum(9))])
    with pytest.raises(InvalidAttributeTypeError):
        printer_summaries(unknown)

    missing = _printers_response([("printer-name", name("p1"))])
    with pytest.raises(AttributeNotFoundError):
        printer_summaries(missing)


def test_single_requested_attribute_roundtrips():
    request = get_printer_attributes("ipp://host/", ["printer-state"])
    assert _operation_group(request).get("requested-attributes").value == keyword("printer-state")
    assert protocol.decode(request.to_bytes()).attributes == request.attributes
