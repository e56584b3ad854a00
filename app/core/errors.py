from fastapi import Request
from fastapi.responses import JSONResponse


class LedgerError(Exception):
    """Rejection of a single ledger operation. State is left untouched."""

    code = "ledger_error"
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class Unauthorized(LedgerError):
    code = "unauthorized"
    status_code = 403


class NotEligible(Unauthorized):
    code = "not_eligible"


class InvalidAmount(LedgerError):
    code = "invalid_amount"


class InvalidScheduleParameters(LedgerError):
    code = "invalid_schedule_parameters"


class InsufficientVested(LedgerError):
    code = "insufficient_vested"


class InsufficientGranted(LedgerError):
    code = "insufficient_granted"


class NotTransferable(LedgerError):
    code = "not_transferable"


class NotVestedYet(LedgerError):
    code = "not_vested_yet"


async def ledger_error_handler(_: Request, exc: LedgerError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"code": exc.code, "detail": exc.detail})
