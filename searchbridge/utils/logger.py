"""
Logging setup for the search tooling: console and rotating file handlers,
plus OpenTelemetry log/trace export when the SDK is enabled.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from opentelemetry import _logs, trace
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import (
    OTLPLogExporter as GrpcOTLPLogExporter,
)
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
    OTLPSpanExporter as GrpcOTLPSpanExporter,
)
from opentelemetry.exporter.otlp.proto.http._log_exporter import (
    OTLPLogExporter as HttpOTLPLogExporter,
)
from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
    OTLPSpanExporter as HttpOTLPSpanExporter,
)
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

DEFAULT_LOG_DIR = "./"
DEFAULT_LOG_FILE = "searchbridge.log"
DEFAULT_SERVICE_NAME = os.getenv("OTEL_SERVICE_NAME", "searchbridge")

_initialized = False


def get_root_logger() -> logging.Logger:
    """Return the process-wide root logger."""
    return logging.getLogger("")


def _build_formatter() -> logging.Formatter:
    return logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _build_file_handler(log_dir: str, log_file: str, formatter: logging.Formatter) -> RotatingFileHandler:
    os.makedirs(log_dir, exist_ok=True)
    handler = RotatingFileHandler(
        os.path.join(log_dir, log_file),
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def _otel_disabled() -> bool:
    return os.getenv("OTEL_SDK_DISABLED", "").strip().lower() in {"1", "true", "yes", "on"}


def _protocol(env_key: str) -> str:
    value = os.getenv(env_key) or os.getenv("OTEL_EXPORTER_OTLP_PROTOCOL", "grpc")
    return value.strip().lower()


def _build_log_exporter() -> Optional[object]:
    if os.getenv("OTEL_LOGS_EXPORTER", "otlp").strip().lower() in {"none", "disabled"}:
        return None
    if _protocol("OTEL_EXPORTER_OTLP_LOGS_PROTOCOL") in {"http/protobuf", "http"}:
        return HttpOTLPLogExporter()
    return GrpcOTLPLogExporter()


def _build_span_exporter() -> Optional[object]:
    if os.getenv("OTEL_TRACES_EXPORTER", "otlp").strip().lower() in {"none", "disabled"}:
        return None
    if _protocol("OTEL_EXPORTER_OTLP_TRACES_PROTOCOL") in {"http/protobuf", "http"}:
        return HttpOTLPSpanExporter()
    return GrpcOTLPSpanExporter()


def _install_otel(service_name: Optional[str], level: str | int) -> Optional[logging.Handler]:
    resource = Resource.create({"service.name": service_name or DEFAULT_SERVICE_NAME})

    tracer_provider = TracerProvider(resource=resource)
    trace.set_tracer_provider(tracer_provider)
    span_exporter = _build_span_exporter()
    if span_exporter is not None:
        tracer_provider.add_span_processor(BatchSpanProcessor(span_exporter))

    logger_provider = LoggerProvider(resource=resource)
    _logs.set_logger_provider(logger_provider)
    log_exporter = _build_log_exporter()
    if log_exporter is None:
        return None
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(log_exporter))
    return LoggingHandler(level=level, logger_provider=logger_provider)


def setup_logging(
    *,
    service_name: Optional[str] = None,
    level: str | int = "INFO",
    log_dir: str = DEFAULT_LOG_DIR,
    log_file: Optional[str] = DEFAULT_LOG_FILE,
    with_console: bool = True,
) -> logging.Logger:
    """
    Configure root logging once per process. Later calls only adjust the level.
    """
    global _initialized

    root = get_root_logger()
    root.setLevel(level.upper() if isinstance(level, str) else level)

    if _initialized:
        return root
    _initialized = True

    formatter = _build_formatter()
    handlers: list[logging.Handler] = []
    if with_console:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        handlers.append(console)
    if log_file:
        handlers.append(_build_file_handler(log_dir, log_file, formatter))

    if not _otel_disabled():
        otel_handler = _install_otel(service_name, root.level)
        if otel_handler is not None:
            handlers.insert(0, otel_handler)

    existing = set(root.handlers)
    for handler in handlers:
        if handler not in existing:
            root.addHandler(handler)

    root.debug("Logging initialized. Level=%s, OTEL_SDK_DISABLED=%s", level, _otel_disabled())
    return root
