import json
import logging
import os

from colorama import Fore, Style
from colorama import init as colorama_init

# Early .env load to check DISABLE_CLOUD_TELEMETRY before importing any OTel
try:
    from dotenv import load_dotenv

    if os.path.isfile(".env"):
        load_dotenv(override=False)
except Exception:
    pass

_telemetry_disabled = os.getenv("DISABLE_CLOUD_TELEMETRY", "false").lower() == "true"

if not _telemetry_disabled:
    from opentelemetry import trace
else:
    trace = None

colorama_init(autoreset=True)

# Define a new logging level named "KEYINFO" with a level of 25
KEYINFO_LEVEL_NUM = 25
logging.addLevelName(KEYINFO_LEVEL_NUM, "KEYINFO")


def keyinfo(self: logging.Logger, message, *args, **kws):
    if self.isEnabledFor(KEYINFO_LEVEL_NUM):
        self._log(KEYINFO_LEVEL_NUM, message, args, **kws)


logging.Logger.keyinfo = keyinfo


class JsonFormatter(logging.Formatter):
    """JSON formatter with optional PII scrubbing for structured logging."""

    def __init__(self, *args, enable_pii_scrubbing: bool = True, **kwargs):
        super().__init__(*args, **kwargs)
        self._pii_scrubber = None
        if enable_pii_scrubbing:
            from utils.pii_filter import get_pii_scrubber

            self._pii_scrubber = get_pii_scrubber()

    def _scrub(self, value: str) -> str:
        if self._pii_scrubber and isinstance(value, str):
            return self._pii_scrubber.scrub_string(value)
        return value

    def format(self, record: logging.LogRecord) -> str:
        message = self._scrub(record.getMessage())

        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "name": record.name,
            "process": record.processName,
            "level": record.levelname,
            "trace_id": getattr(record, "trace_id", "-"),
            "span_id": getattr(record, "span_id", "-"),
            "connection_id": getattr(record, "connection_id", "-"),
            "operation_name": getattr(record, "operation_name", "-"),
            "message": message,
            "file": record.filename,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Custom attributes passed through ``extra=``
        for attr_name in dir(record):
            if attr_name.startswith(("call_", "agent_", "relay_", "store_", "operation_")):
                log_record[attr_name] = self._scrub(getattr(record, attr_name))

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str)


class PrettyFormatter(logging.Formatter):
    LEVEL_COLORS = {
        "DEBUG": Fore.CYAN,
        "INFO": Fore.GREEN,
        "WARNING": Fore.YELLOW,
        "ERROR": Fore.RED,
        "CRITICAL": Fore.MAGENTA,
        "KEYINFO": Fore.BLUE,
    }

    def format(self, record: logging.LogRecord) -> str:
        timestamp = self.formatTime(record, self.datefmt)
        level = record.levelname
        name = record.name
        msg = record.getMessage()
        if record.exc_info:
            msg = f"{msg}\n{self.formatException(record.exc_info)}"

        color = self.LEVEL_COLORS.get(level, "")
        return f"{Fore.WHITE}[{timestamp}]{Style.RESET_ALL} {color}{level}{Style.RESET_ALL} - {Fore.BLUE}{name}{Style.RESET_ALL}: {msg}"


class PIIScrubbingFilter(logging.Filter):
    """
    Logging filter that scrubs caller phone numbers and emails from log
    messages before they are emitted.

    See utils/pii_filter.py for the environment toggles.
    """

    def __init__(self, name: str = ""):
        super().__init__(name)
        from utils.pii_filter import get_pii_scrubber

        self._scrubber = get_pii_scrubber()

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._scrubber.config.enabled:
            return True

        if record.msg and isinstance(record.msg, str):
            record.msg = self._scrubber.scrub_string(record.msg)

        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    k: self._scrubber.scrub_string(v) if isinstance(v, str) else v
                    for k, v in record.args.items()
                }
            elif isinstance(record.args, tuple):
                record.args = tuple(
                    self._scrubber.scrub_string(a) if isinstance(a, str) else a
                    for a in record.args
                )

        return True


class TraceLogFilter(logging.Filter):
    """
    Enriches log records with trace context and relay correlation.

    ``connection_id`` is taken from the record itself when the caller passed it
    through ``extra=``, otherwise from the current span's attributes.
    """

    def filter(self, record):
        record.connection_id = getattr(record, "connection_id", "-")

        if _telemetry_disabled or trace is None:
            record.trace_id = "-"
            record.span_id = "-"
            record.operation_name = "-"
            return True

        span = trace.get_current_span()
        context = span.get_span_context() if span else None
        record.trace_id = f"{context.trace_id:032x}" if context and context.trace_id else "-"
        record.span_id = f"{context.span_id:016x}" if context and context.span_id else "-"

        if span and span.is_recording():
            span_attributes = getattr(span, "_attributes", None) or {}
            record.operation_name = span_attributes.get(
                "operation.name", getattr(span, "name", "-")
            )
            if record.connection_id == "-":
                record.connection_id = span_attributes.get("relay.connection.id", "-")
        else:
            record.operation_name = "-"

        return True


def get_logger(
    name: str = "callcenter",
    level: int | None = None,
    include_stream_handler: bool = True,
) -> logging.Logger:
    """
    Get or create a logger with trace enrichment and PII scrubbing.

    configure_azure_monitor() attaches its exporter handler to the ROOT logger,
    so no export handler is added here; records propagate to root.

    Args:
        name: Logger name (hierarchical, e.g., "api.endpoints.agent")
        level: Optional logging level; defaults to INFO if logger has no level set
        include_stream_handler: Whether to add a console StreamHandler

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if level is not None or logger.level == 0:
        logger.setLevel(level or logging.INFO)

    is_production = os.environ.get("ENV", "dev").lower() == "prod"

    if not any(isinstance(f, TraceLogFilter) for f in logger.filters):
        logger.addFilter(TraceLogFilter())

    if not any(isinstance(f, PIIScrubbingFilter) for f in logger.filters):
        logger.addFilter(PIIScrubbingFilter())

    if include_stream_handler and not any(
        isinstance(h, logging.StreamHandler) for h in logger.handlers
    ):
        sh = logging.StreamHandler()
        sh.setFormatter(JsonFormatter() if is_production else PrettyFormatter())
        logger.addHandler(sh)

    return logger
