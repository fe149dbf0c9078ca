import logging
from fastapi.exceptions import RequestValidationError
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Error interno del servidor"
ROUTE_NOT_FOUND = "Ruta no encontrada"


class NomRecordsError(Exception):
    """Base error. `message` is what the client sees; the cause stays in the logs."""

    status_code = 500
    message = GENERIC_ERROR

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.message)
        self.detail = detail


class MalformedRowShape(NomRecordsError, ValueError):
    """A row handed to the multi-row insert builder has the wrong arity."""


class InvalidPayload(NomRecordsError):
    status_code = 400
    message = "Datos inválidos"


class PoolExhaustedOrTimeout(NomRecordsError):
    status_code = 503
    message = "Servicio no disponible"


class StorageOperationFailed(NomRecordsError):
    pass


class DuplicateSubmission(NomRecordsError):
    status_code = 409
    message = "Registro duplicado"


def register_exception_handlers(app):
    @app.exception_handler(NomRecordsError)
    async def nom_records_exception_handler(request: Request, exc: NomRecordsError):
        if exc.status_code >= 500:
            logger.error(
                "%s on %s %s: %s",
                type(exc).__name__,
                request.method,
                request.url.path,
                exc.detail,
                exc_info=exc.__cause__,
            )
        else:
            logger.info("%s: %s", type(exc).__name__, exc.detail)
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.info("HTTP exception", extra={"status_code": exc.status_code})
        detail = exc.detail
        if exc.status_code == 404 and detail == "Not Found":
            detail = ROUTE_NOT_FOUND
        return JSONResponse({"error": detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.info("Validation error", extra={"errors": exc.errors()})
        return JSONResponse(
            {"error": "Validation error", "details": jsonable_errors(exc)},
            status_code=422,
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return JSONResponse({"error": GENERIC_ERROR}, status_code=500)


def jsonable_errors(exc: RequestValidationError) -> list:
    # pydantic may put exception instances under "ctx"
    errors = []
    for err in exc.errors():
        err = dict(err)
        if "ctx" in err:
            err["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
        errors.append(err)
    return errors
