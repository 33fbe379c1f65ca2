import httpx
import pytest

from ipp_client.client import IppClient
from ipp_proto import protocol
from ipp_proto.errors import IppStatusError
from ipp_proto.request import build_request, build_response
from ipp_proto.value import integer, text
from ipp_shared.constants import (
    IPP_VERSION_1_1,
    DelimiterTag,
    Operation,
    StatusCode,
)


def _answer(status: int, request_id: int = 1) -> bytes:
    response = build_response(IPP_VERSION_1_1, status, request_id)
    if status >= 0x0400:
        response.add(DelimiterTag.OPERATION_ATTRIBUTES, "status-message", text("printer is gone"))
    else:
        response.add(DelimiterTag.JOB_ATTRIBUTES, "job-id", integer(17))
    return response.to_bytes()


@pytest.mark.asyncio
async def test_send_streams_request_and_decodes_response():
    """The client posts header and payload as one application/ipp body.

    Returns:
        None
    """
    seen = {}

    async def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["content_type"] = request.headers["Content-Type"]
        seen["body"] = await request.aread()
        return httpx.Response(200, content=_answer(StatusCode.SUCCESSFUL_OK))

    request = build_request(IPP_VERSION_1_1, Operation.PRINT_JOB, "ipp://printer.local/ipp/print")
    head = request.to_bytes()
    request.attach_payload(b"%PDF-1.7 document")

    client = IppClient("ipp://printer.local/ipp/print", transport=httpx.MockTransport(handler))
    response = await client.send(request)

    assert seen["url"] == "http://printer.local:631/ipp/print"
    assert seen["content_type"] == "application/ipp"
    assert seen["body"] == head + b"%PDF-1.7 document"
    decoded = protocol.decode(seen["body"])
    assert decoded.header.operation == Operation.PRINT_JOB
    assert response.header.status == StatusCode.SUCCESSFUL_OK
    assert response.attributes.find(DelimiterTag.JOB_ATTRIBUTES, "job-id").value.as_integer() == 17


@pytest.mark.asyncio
async def test_send_raises_on_error_status():
    """Error statuses surface as IppStatusError with the status message.

    Returns:
        None
    """

    async def handler(request: httpx.Request) -> httpx.Response:
        await request.aread()
        return httpx.Response(200, content=_answer(StatusCode.CLIENT_ERROR_NOT_FOUND))

    client = IppClient("ipp://printer.local/", transport=httpx.MockTransport(handler))
    request = build_request(IPP_VERSION_1_1, Operation.GET_JOBS, "ipp://printer.local/")

    with pytest.raises(IppStatusError) as err:
        await client.send(request)
    assert err.value.status == StatusCode.CLIENT_ERROR_NOT_FOUND
    assert "printer is gone" in str(err.value)


@pytest.mark.asyncio
async def test_send_raw_returns_error_responses():
    async def handler(request: httpx.Request) -> httpx.Response:
        await request.aread()
        return httpx.Response(200, content=_answer(StatusCode.SERVER_ERROR_INTERNAL_ERROR))

    client = IppClient("ipp://printer.local/", transport=httpx.MockTransport(handler))
    response = await client.send_raw(build_request(IPP_VERSION_1_1, Operation.GET_JOBS, "ipp://printer.local/"))
    assert response.header.status == StatusCode.SERVER_ERROR_INTERNAL_ERROR


@pytest.mark.asyncio
async def test_transport_failure_becomes_connection_error():
    async def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = IppClient("ipp://printer.local/", transport=httpx.MockTransport(handler))
    with pytest.raises(ConnectionError) as err:
        await client.send(build_request(IPP_VERSION_1_1, Operation.GET_JOBS, "ipp://printer.local/"))
    assert "http://printer.local:631/" in str(err.value)


@pytest.mark.asyncio
async def test_http_error_status_is_raised():
    async def handler(request: httpx.Request) -> httpx.Response:
        await request.aread()
        return httpx.Response(401)

    client = IppClient("ipp://printer.local/", transport=httpx.MockTransport(handler))
    with pytest.raises(httpx.HTTPStatusError):
        await client.send(build_request(IPP_VERSION_1_1, Operation.GET_JOBS, "ipp://printer.local/"))


@pytest.mark.asyncio
async def test_basic_auth_header_is_sent():
    seen = {}

    async def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        await request.aread()
        return httpx.Response(200, content=_answer(StatusCode.SUCCESSFUL_OK))

    client = IppClient(
        "ipp://printer.local/",
        username="alice",
        password="secret",
        transport=httpx.MockTransport(handler),
    )
    await client.send(build_request(IPP_VERSION_1_1, Operation.GET_JOBS, "ipp://printer.local/"))
    assert seen["auth"].startswith("Basic ")
