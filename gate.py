import logging
from typing import Awaitable, Callable

from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.requests import Request

from exceptions import LedgerError, Unauthorized
from sessions import Principal, PrincipalResolver


logger = logging.getLogger(__name__)

ReportHandler = Callable[[Principal], Awaitable[BaseModel]]


def error_response(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"error": message, "code": code}
    )


class AuthorizationGate:
    """Runs a report handler on behalf of an authenticated principal.

    A request without a principal gets a 401 and the handler is never
    called. Whatever the handler raises is turned into a JSON error
    response here, so no exception reaches the transport layer.
    """

    def __init__(self, resolver: PrincipalResolver) -> None:
        self.resolver = resolver

    async def run(
        self, request: Request, handler: ReportHandler, *, report: str
    ) -> JSONResponse:
        try:
            principal = self.resolver.resolve(request)
        except Exception:
            logger.exception(f"principal_resolution_failed: report={report}")
            return error_response(500, "Failed to resolve principal", LedgerError.code)
        if principal is None:
            logger.debug(f"report_unauthorized: report={report}")
            return error_response(401, "Unauthorized", Unauthorized.code)

        try:
            payload = await handler(principal)
        except Unauthorized as exc:
            return error_response(exc.status_code, str(exc), exc.code)
        except LedgerError as exc:
            if exc.status_code >= 500:
                logger.exception(
                    f"report_failed: report={report} user={principal.user_id}"
                )
            else:
                logger.info(
                    f"report_rejected: report={report} user={principal.user_id} reason={exc}"
                )
            return error_response(
                exc.status_code, str(exc) or exc.__class__.__name__, exc.code
            )
        except Exception as exc:
            logger.exception(f"report_failed: report={report} user={principal.user_id}")
            return error_response(
                500, str(exc) or exc.__class__.__name__, LedgerError.code
            )

        return JSONResponse(content=payload.model_dump(by_alias=True, mode="json"))
