from enum import Enum


class OutcomeStatus(Enum):
    VALID = "valid"
    REJECTED = "rejected"
    FAILED = "failed"


class ErrorKind(Enum):
    HEADER_DECODE_ERROR = "header_decode_error"
    KEY_NOT_FOUND = "key_not_found"
    CLAIMS_DECODE_ERROR = "claims_decode_error"
