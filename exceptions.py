class LedgerError(Exception):
    code = "InternalError"
    status_code = 500


class Unauthorized(LedgerError):
    code = "Unauthorized"
    status_code = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class ReportQueryError(LedgerError, ValueError):
    code = "BadRequest"
    status_code = 400


class StoreFailure(LedgerError):
    pass


class AggregationInputError(LedgerError, ValueError):
    def __init__(self, message: str, *, transaction_id: object = None) -> None:
        super().__init__(message)
        self.transaction_id = transaction_id
