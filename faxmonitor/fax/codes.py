"""Raw status vocabularies reported by the fax server.

Member names keep the vendor namespace prefix so the normalizer can strip it
the same way for every code.
"""

from enum import IntEnum, IntFlag


class JobStatusCode(IntEnum):
    """Job status values. The server combines some of them into undocumented sums."""

    fjsPENDING = 0x1
    fjsINPROGRESS = 0x2
    fjsFAILED = 0x8
    fjsPAUSED = 0x10
    fjsNOLINE = 0x20
    fjsRETRYING = 0x40
    fjsRETRIES_EXCEEDED = 0x80
    fjsCOMPLETED = 0x100
    fjsCANCELED = 0x200
    fjsCANCELING = 0x400
    fjsROUTING = 0x800


class ExtendedStatusCode(IntEnum):
    """Extended (line-level) status values."""

    fjesNONE = 0
    fjesDISCONNECTED = 1
    fjesINITIALIZING = 2
    fjesDIALING = 3
    fjesTRANSMITTING = 4
    fjesANSWERED = 5
    fjesRECEIVING = 6
    fjesLINE_UNAVAILABLE = 7
    fjesBUSY = 8
    fjesNO_ANSWER = 9
    fjesBAD_ADDRESS = 10
    fjesNO_DIAL_TONE = 11
    fjesFATAL_ERROR = 12
    fjesCALL_DELAYED = 13
    fjesCALL_BLACKLISTED = 14
    fjesNOT_FAX_CALL = 15
    fjesPARTIALLY_RECEIVED = 16
    fjesHANDLED = 17
    fjesCALL_COMPLETED = 18
    fjesCALL_ABORTED = 19
    fjesPROPRIETARY = 0x01000000


class AccessRight(IntFlag):
    """Rights granted to the connected process."""

    SUBMIT_LOW = 0x1
    SUBMIT_NORMAL = 0x2
    SUBMIT_HIGH = 0x4
    QUERY_OUT_JOBS = 0x8
    MANAGE_OUT_JOBS = 0x10
    QUERY_CONFIG = 0x20
    MANAGE_CONFIG = 0x40
    QUERY_ARCHIVES = 0x80
    MANAGE_ARCHIVES = 0x100
    MANAGE_RECEIPT_FOLDER = 0x200


# Queue entries at or beyond this status will not transition any further.
RETRIES_EXCEEDED_THRESHOLD = int(JobStatusCode.fjsRETRIES_EXCEEDED)


def is_terminal_status(raw_status: int) -> bool:
    return raw_status >= RETRIES_EXCEEDED_THRESHOLD
