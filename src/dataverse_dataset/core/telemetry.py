# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Request telemetry for the Dataverse dataset client.

Each dataset request can produce one OpenTelemetry span, a duration sample and
request/error counts, one log record, and callbacks to user hooks. Spans, samples
and log records all carry the same attributes: operation, method, URL, dataset id
and addressing mode.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Protocol, Union, runtime_checkable

from opentelemetry import metrics, trace
from opentelemetry.trace import Status, StatusCode

from ..common.constants import (
    OTEL_ATTR_DATAVERSE_ADDRESSING,
    OTEL_ATTR_DATAVERSE_DATASET,
    OTEL_ATTR_DATAVERSE_OPERATION,
    OTEL_ATTR_HTTP_METHOD,
    OTEL_ATTR_HTTP_STATUS_CODE,
    OTEL_ATTR_HTTP_URL,
)

_INSTRUMENTATION_NAME = "dataverse_dataset"

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TelemetryConfig:
    """Opt-in telemetry for dataset requests.

    :param enable_tracing: Start a client span per request on the global tracer provider.
    :param enable_metrics: Record ``dataverse.client.request.duration`` and request/error counters.
    :param enable_logging: Write one record per request to ``logger_name``.
    :param log_level: Level the request logger is set to.
    :param logger_name: Name of the request logger.
    :param hooks: Objects implementing any subset of :class:`TelemetryHook`.

    Example::

        config = DataverseConfig(telemetry=TelemetryConfig(enable_logging=True, log_level="DEBUG"))
    """

    enable_tracing: bool = False
    enable_metrics: bool = False
    enable_logging: bool = False

    log_level: str = "WARNING"
    logger_name: str = _INSTRUMENTATION_NAME

    hooks: List["TelemetryHook"] = field(default_factory=list)

    @property
    def active(self) -> bool:
        return bool(self.enable_tracing or self.enable_metrics or self.enable_logging or self.hooks)


@dataclass
class RequestContext:
    """One dataset request as seen by hooks."""

    method: str
    url: str
    operation: str  # "datasets.<method name>"
    dataset_id: Optional[str] = None
    addressing: Optional[str] = None  # "id" or "persistentId"
    start_time: float = field(default_factory=time.perf_counter)
    # Scratch space shared between a hook's start and end callbacks
    custom_data: Dict[str, Any] = field(default_factory=dict)
    _span: Any = field(default=None, repr=False)

    def attributes(self) -> Dict[str, Any]:
        """Span attributes for this request; dataset attributes only when a dataset is known."""
        attrs: Dict[str, Any] = {
            OTEL_ATTR_DATAVERSE_OPERATION: self.operation,
            OTEL_ATTR_HTTP_METHOD: self.method,
            OTEL_ATTR_HTTP_URL: self.url,
        }
        if self.dataset_id:
            attrs[OTEL_ATTR_DATAVERSE_DATASET] = self.dataset_id
        if self.addressing:
            attrs[OTEL_ATTR_DATAVERSE_ADDRESSING] = self.addressing
        return attrs

    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.start_time) * 1000


@dataclass
class ResponseContext:
    """Outcome of a request that received an HTTP response."""

    status_code: int
    duration_ms: float
    response_size: Optional[int] = None
    # Set when the status was outside the operation's accepted set
    error: Optional[Exception] = None


@runtime_checkable
class TelemetryHook(Protocol):
    """Callbacks around each dataset request. Implement only the ones you need.

    Hook failures are logged and never affect the request.

    Example::

        class AuditHook:
            def on_request_end(self, request, response):
                audit_log.append((request.dataset_id, request.operation, response.status_code))
    """

    def on_request_start(self, context: RequestContext) -> None: ...

    def on_request_end(self, request: RequestContext, response: ResponseContext) -> None: ...

    def on_request_error(self, request: RequestContext, error: Exception) -> None: ...

    def get_additional_headers(self) -> Dict[str, str]: ...


class _RequestInstruments:
    """Metric instruments shared by all requests of one manager."""

    def __init__(self, meter: Any) -> None:
        self.duration = meter.create_histogram(
            name="dataverse.client.request.duration",
            description="Duration of Dataverse dataset requests",
            unit="ms",
        )
        self.requests = meter.create_counter(
            name="dataverse.client.request.count",
            description="Number of Dataverse dataset requests",
            unit="1",
        )
        self.errors = meter.create_counter(
            name="dataverse.client.error.count",
            description="Number of Dataverse dataset requests answered with an unexpected status",
            unit="1",
        )

    def record(self, ctx: RequestContext, status_code: int, duration_ms: float, failed: bool) -> None:
        attrs = {"operation": ctx.operation, "method": ctx.method, "status_code": status_code}
        self.duration.record(duration_ms, attrs)
        self.requests.add(1, attrs)
        if failed:
            self.errors.add(1, attrs)


class TelemetryManager:
    """Instruments dataset requests according to a :class:`TelemetryConfig`.

    Internal; used by the API client around every request.
    """

    def __init__(self, config: Optional[TelemetryConfig] = None) -> None:
        config = config or TelemetryConfig()
        self._hooks = tuple(config.hooks)
        self._tracer = trace.get_tracer(_INSTRUMENTATION_NAME) if config.enable_tracing else None
        self._instruments = (
            _RequestInstruments(metrics.get_meter(_INSTRUMENTATION_NAME)) if config.enable_metrics else None
        )
        self._logger: Optional[logging.Logger] = None
        if config.enable_logging:
            self._logger = logging.getLogger(config.logger_name)
            self._logger.setLevel(config.log_level.upper())

    def _notify(self, callback: str, *args: Any) -> None:
        for hook in self._hooks:
            fn = getattr(hook, callback, None)
            if fn is None:
                continue
            try:
                fn(*args)
            except Exception:
                _LOGGER.debug("Telemetry hook %r failed in %s", hook, callback, exc_info=True)

    def get_additional_headers(self) -> Dict[str, str]:
        """Merge the extra request headers of all hooks, later hooks winning."""
        headers: Dict[str, str] = {}
        for hook in self._hooks:
            fn = getattr(hook, "get_additional_headers", None)
            if fn is None:
                continue
            try:
                headers.update(fn() or {})
            except Exception:
                _LOGGER.debug("Telemetry hook %r failed in get_additional_headers", hook, exc_info=True)
        return headers

    @contextmanager
    def trace_request(
        self,
        operation: str,
        method: str,
        url: str,
        dataset_id: Optional[str] = None,
        addressing: Optional[str] = None,
    ) -> Iterator[RequestContext]:
        """
        Instrument one request.

        Call :meth:`record_response` inside the block once a response arrives. An
        exception leaving the block (a transport failure) marks the span as failed,
        is logged and reported to ``on_request_error`` hooks, then propagates.
        """
        ctx = RequestContext(method, url, operation, dataset_id, addressing)
        self._notify("on_request_start", ctx)
        if self._tracer is not None:
            ctx._span = self._tracer.start_span(
                f"Dataverse {operation}",
                kind=trace.SpanKind.CLIENT,
                attributes=ctx.attributes(),
            )
        try:
            yield ctx
        except Exception as e:
            if ctx._span is not None:
                ctx._span.set_status(Status(StatusCode.ERROR, str(e)))
                ctx._span.record_exception(e)
            self._log(logging.WARNING, ctx, f"{operation} {method} failed after {ctx.elapsed_ms():.1f}ms: {e}")
            self._notify("on_request_error", ctx, e)
            raise
        finally:
            if ctx._span is not None:
                ctx._span.end()

    def record_response(
        self,
        ctx: RequestContext,
        status_code: int,
        response_size: Optional[int] = None,
        error: Optional[Exception] = None,
    ) -> None:
        """Record the response of the request traced by ``ctx``."""
        response = ResponseContext(status_code, ctx.elapsed_ms(), response_size, error)
        if ctx._span is not None:
            ctx._span.set_attribute(OTEL_ATTR_HTTP_STATUS_CODE, status_code)
            if error is not None:
                ctx._span.set_status(Status(StatusCode.ERROR, str(error)))
        if self._instruments is not None:
            self._instruments.record(ctx, status_code, response.duration_ms, error is not None)
        self._log(
            logging.WARNING if error is not None else logging.DEBUG,
            ctx,
            f"{ctx.operation} {ctx.method} {status_code} {response.duration_ms:.1f}ms",
        )
        self._notify("on_request_end", ctx, response)

    def _log(self, level: int, ctx: RequestContext, message: str) -> None:
        if self._logger is not None:
            self._logger.log(level, message, extra={"dataset_id": ctx.dataset_id, "addressing": ctx.addressing})


class NoOpTelemetryManager:
    """Stand-in used when telemetry is off."""

    @contextmanager
    def trace_request(self, operation: str, method: str, url: str, *args: Any) -> Iterator[RequestContext]:
        yield RequestContext(method, url, operation, *args)

    def record_response(self, *args: Any, **kwargs: Any) -> None:
        pass

    def get_additional_headers(self) -> Dict[str, str]:
        return {}


def create_telemetry_manager(
    config: Optional[TelemetryConfig],
) -> Union[TelemetryManager, NoOpTelemetryManager]:
    if config is None or not config.active:
        return NoOpTelemetryManager()
    return TelemetryManager(config)


__all__ = [
    "TelemetryConfig",
    "TelemetryHook",
    "TelemetryManager",
    "NoOpTelemetryManager",
    "RequestContext",
    "ResponseContext",
    "create_telemetry_manager",
]
