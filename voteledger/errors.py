# voteledger/errors.py
# Error kinds surfaced to callers. Every one of them aborts the operation
# that raised it with no state change.


class ElectionError(Exception):
    kind = "ElectionError"

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind)
        self.message = message or self.kind

    def to_dict(self):
        return {"error": self.kind, "detail": self.message}


class Unauthorized(ElectionError):
    kind = "Unauthorized"


class InvalidPeriod(ElectionError):
    kind = "InvalidPeriod"


class CandidateNotFound(ElectionError):
    kind = "CandidateNotFound"


class CandidateInactive(ElectionError):
    kind = "CandidateInactive"


class NotRegistered(ElectionError):
    kind = "NotRegistered"


class AlreadyRegistered(ElectionError):
    kind = "AlreadyRegistered"


class InsufficientPayment(ElectionError):
    kind = "InsufficientPayment"


class UnexpectedPayment(ElectionError):
    kind = "UnexpectedPayment"


class InvalidAmount(ElectionError):
    kind = "InvalidAmount"


class VoteQuotaExceeded(ElectionError):
    kind = "VoteQuotaExceeded"


class AlreadyReleased(ElectionError):
    kind = "AlreadyReleased"


class TransferFailed(ElectionError):
    kind = "TransferFailed"


# HTTP status used by the API layer for each kind
STATUS_CODES = {
    Unauthorized.kind: 403,
    CandidateNotFound.kind: 404,
    AlreadyRegistered.kind: 409,
    AlreadyReleased.kind: 409,
    TransferFailed.kind: 502,
}


def status_code_for(error: ElectionError) -> int:
    return STATUS_CODES.get(error.kind, 400)
