"""Shared IPP constants used by the codec, the client and the CLI."""

from __future__ import annotations

from enum import IntEnum
from typing import NamedTuple


class IppVersion(NamedTuple):
    """Protocol version carried in the first two header bytes."""

    major: int
    minor: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


IPP_VERSION_1_0 = IppVersion(1, 0)
IPP_VERSION_1_1 = IppVersion(1, 1)
IPP_VERSION_2_0 = IppVersion(2, 0)
IPP_VERSION_2_1 = IppVersion(2, 1)
IPP_VERSION_2_2 = IppVersion(2, 2)


class DelimiterTag(IntEnum):
    """Group boundaries of the attribute section."""

    OPERATION_ATTRIBUTES = 0x01
    JOB_ATTRIBUTES = 0x02
    END_OF_ATTRIBUTES = 0x03
    PRINTER_ATTRIBUTES = 0x04
    UNSUPPORTED_ATTRIBUTES = 0x05
    SUBSCRIPTION_ATTRIBUTES = 0x06
    EVENT_NOTIFICATION_ATTRIBUTES = 0x07
    RESOURCE_ATTRIBUTES = 0x08
    DOCUMENT_ATTRIBUTES = 0x09
    SYSTEM_ATTRIBUTES = 0x0A


class ValueTag(IntEnum):
    """Value kinds that follow a delimiter inside a group."""

    # Out-of-band
    UNSUPPORTED = 0x10
    DEFAULT = 0x11
    UNKNOWN = 0x12
    NO_VALUE = 0x13
    NOT_SETTABLE = 0x15
    DELETE_ATTRIBUTE = 0x16
    ADMIN_DEFINE = 0x17

    # Integer types
    INTEGER = 0x21
    BOOLEAN = 0x22
    ENUM = 0x23

    # Octet string types
    OCTET_STRING = 0x30
    DATE_TIME = 0x31
    RESOLUTION = 0x32
    RANGE_OF_INTEGER = 0x33
    BEG_COLLECTION = 0x34
    TEXT_WITH_LANGUAGE = 0x35
    NAME_WITH_LANGUAGE = 0x36
    END_COLLECTION = 0x37

    # Character string types
    TEXT_WITHOUT_LANGUAGE = 0x41
    NAME_WITHOUT_LANGUAGE = 0x42
    KEYWORD = 0x44
    URI = 0x45
    URI_SCHEME = 0x46
    CHARSET = 0x47
    NATURAL_LANGUAGE = 0x48
    MIME_MEDIA_TYPE = 0x49
    MEMBER_ATTR_NAME = 0x4A


OUT_OF_BAND_TAGS = frozenset(
    {
        ValueTag.UNSUPPORTED,
        ValueTag.DEFAULT,
        ValueTag.UNKNOWN,
        ValueTag.NO_VALUE,
        ValueTag.NOT_SETTABLE,
        ValueTag.DELETE_ATTRIBUTE,
        ValueTag.ADMIN_DEFINE,
    }
)

STRING_TAGS = frozenset(
    {
        ValueTag.TEXT_WITHOUT_LANGUAGE,
        ValueTag.NAME_WITHOUT_LANGUAGE,
        ValueTag.KEYWORD,
        ValueTag.URI,
        ValueTag.URI_SCHEME,
        ValueTag.CHARSET,
        ValueTag.NATURAL_LANGUAGE,
        ValueTag.MIME_MEDIA_TYPE,
    }
)


class Operation(IntEnum):
    """Operation codes placed in the header of a request."""

    PRINT_JOB = 0x0002
    PRINT_URI = 0x0003
    VALIDATE_JOB = 0x0004
    CREATE_JOB = 0x0005
    SEND_DOCUMENT = 0x0006
    SEND_URI = 0x0007
    CANCEL_JOB = 0x0008
    GET_JOB_ATTRIBUTES = 0x0009
    GET_JOBS = 0x000A
    GET_PRINTER_ATTRIBUTES = 0x000B
    HOLD_JOB = 0x000C
    RELEASE_JOB = 0x000D
    RESTART_JOB = 0x000E
    PAUSE_PRINTER = 0x0010
    RESUME_PRINTER = 0x0011
    PURGE_JOBS = 0x0012

    # CUPS extensions
    CUPS_GET_DEFAULT = 0x4001
    CUPS_GET_PRINTERS = 0x4002
    CUPS_ADD_MODIFY_PRINTER = 0x4003
    CUPS_DELETE_PRINTER = 0x4004
    CUPS_GET_CLASSES = 0x4005
    CUPS_ADD_MODIFY_CLASS = 0x4006
    CUPS_DELETE_CLASS = 0x4007
    CUPS_ACCEPT_JOBS = 0x4008
    CUPS_REJECT_JOBS = 0x4009
    CUPS_SET_DEFAULT = 0x400A
    CUPS_GET_DEVICES = 0x400B
    CUPS_GET_PPDS = 0x400C
    CUPS_MOVE_JOB = 0x400D
    CUPS_AUTHENTICATE_JOB = 0x400E
    CUPS_GET_PPD = 0x400F
    CUPS_GET_DOCUMENT = 0x4027
    CUPS_CREATE_LOCAL_PRINTER = 0x4028


class StatusCode(IntEnum):
    """Status codes placed in the header of a response."""

    SUCCESSFUL_OK = 0x0000
    SUCCESSFUL_OK_IGNORED_OR_SUBSTITUTED_ATTRIBUTES = 0x0001
    SUCCESSFUL_OK_CONFLICTING_ATTRIBUTES = 0x0002

    CLIENT_ERROR_BAD_REQUEST = 0x0400
    CLIENT_ERROR_FORBIDDEN = 0x0401
    CLIENT_ERROR_NOT_AUTHENTICATED = 0x0402
    CLIENT_ERROR_NOT_AUTHORIZED = 0x0403
    CLIENT_ERROR_NOT_POSSIBLE = 0x0404
    CLIENT_ERROR_TIMEOUT = 0x0405
    CLIENT_ERROR_NOT_FOUND = 0x0406
    CLIENT_ERROR_GONE = 0x0407
    CLIENT_ERROR_REQUEST_ENTITY_TOO_LARGE = 0x0408
    CLIENT_ERROR_REQUEST_VALUE_TOO_LONG = 0x0409
    CLIENT_ERROR_DOCUMENT_FORMAT_NOT_SUPPORTED = 0x040A
    CLIENT_ERROR_ATTRIBUTES_OR_VALUES_NOT_SUPPORTED = 0x040B
    CLIENT_ERROR_URI_SCHEME_NOT_SUPPORTED = 0x040C
    CLIENT_ERROR_CHARSET_NOT_SUPPORTED = 0x040D
    CLIENT_ERROR_CONFLICTING_ATTRIBUTES = 0x040E
    CLIENT_ERROR_COMPRESSION_NOT_SUPPORTED = 0x040F
    CLIENT_ERROR_COMPRESSION_ERROR = 0x0410
    CLIENT_ERROR_DOCUMENT_FORMAT_ERROR = 0x0411
    CLIENT_ERROR_DOCUMENT_ACCESS_ERROR = 0x0412

    SERVER_ERROR_INTERNAL_ERROR = 0x0500
    SERVER_ERROR_OPERATION_NOT_SUPPORTED = 0x0501
    SERVER_ERROR_SERVICE_UNAVAILABLE = 0x0502
    SERVER_ERROR_VERSION_NOT_SUPPORTED = 0x0503
    SERVER_ERROR_DEVICE_ERROR = 0x0504
    SERVER_ERROR_TEMPORARY_ERROR = 0x0505
    SERVER_ERROR_NOT_ACCEPTING_JOBS = 0x0506
    SERVER_ERROR_BUSY = 0x0507
    SERVER_ERROR_JOB_CANCELED = 0x0508
    SERVER_ERROR_MULTIPLE_DOCUMENT_JOBS_NOT_SUPPORTED = 0x0509


# First status code that signals a failed request.
STATUS_ERROR_THRESHOLD = 0x0400


class PrinterState(IntEnum):
    """Values of the ``printer-state`` enum attribute."""

    IDLE = 3
    PROCESSING = 4
    STOPPED = 5


class JobState(IntEnum):
    """Values of the ``job-state`` enum attribute."""

    PENDING = 3
    PENDING_HELD = 4
    PROCESSING = 5
    PROCESSING_STOPPED = 6
    CANCELED = 7
    ABORTED = 8
    COMPLETED = 9


# Resolution units
UNITS_DOTS_PER_INCH = 3
UNITS_DOTS_PER_CM = 4

# Well-known attribute names
ATTRIBUTES_CHARSET = "attributes-charset"
ATTRIBUTES_NATURAL_LANGUAGE = "attributes-natural-language"
PRINTER_URI = "printer-uri"
REQUESTING_USER_NAME = "requesting-user-name"
JOB_NAME = "job-name"
JOB_ID = "job-id"
DOCUMENT_FORMAT = "document-format"
REQUESTED_ATTRIBUTES = "requested-attributes"

# Bootstrap values every request and response carries
DEFAULT_CHARSET = "utf-8"
DEFAULT_NATURAL_LANGUAGE = "en"

# Request id assigned to freshly built requests
INITIAL_REQUEST_ID = 1

IPP_CONTENT_TYPE = "application/ipp"
IPP_DEFAULT_PORT = 631
