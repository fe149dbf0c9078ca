import logging
import sys
import contextvars

LOG_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"

# Populated per request by CorrelationIdMiddleware
request_id_ctx_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)

# Third-party loggers that flood INFO with one line per statement / request
NOISY_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "multipart")


class RequestIdFilter(logging.Filter):
    """Stamps every record with the current request id ('none' outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx_var.get() or "none"
        return True


def _ensure_filter(handler: logging.Handler) -> None:
    if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
        handler.addFilter(RequestIdFilter())


def configure_logging(level: str | None = None, sql_echo: bool = False) -> None:
    """
    Configure the root logger once; later calls only adjust levels.

    Handlers installed by someone else (uvicorn, pytest) are kept and get
    the request id filter so LOG_FORMAT-style formatters still work.
    """
    root = logging.getLogger()
    level_name = (level or "INFO").upper()

    if root.handlers:
        for h in root.handlers:
            _ensure_filter(h)
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        _ensure_filter(handler)
        root.addHandler(handler)

    root.setLevel(level_name)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if sql_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
