# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Tests for telemetry infrastructure."""

import logging

import pytest
from unittest.mock import MagicMock, patch

from dataverse_dataset.client import DataverseClient
from dataverse_dataset.core.config import DataverseConfig
from dataverse_dataset.core.telemetry import (
    TelemetryConfig,
    TelemetryManager,
    NoOpTelemetryManager,
    RequestContext,
    ResponseContext,
    create_telemetry_manager,
)


class TestTelemetryConfig:
    """Tests for TelemetryConfig dataclass."""

    def test_default_values(self):
        config = TelemetryConfig()
        assert config.enable_tracing is False
        assert config.enable_metrics is False
        assert config.enable_logging is False
        assert config.logger_name == "dataverse_dataset"
        assert config.hooks == []

    def test_active(self):
        assert TelemetryConfig().active is False
        assert TelemetryConfig(enable_metrics=True).active is True
        assert TelemetryConfig(hooks=[object()]).active is True

    def test_immutability(self):
        config = TelemetryConfig(enable_tracing=True)
        with pytest.raises(AttributeError):
            config.enable_tracing = False


class TestTelemetryManagerFactory:
    """Tests for create_telemetry_manager factory."""

    def test_returns_noop_when_config_none(self):
        manager = create_telemetry_manager(None)
        assert isinstance(manager, NoOpTelemetryManager)

    def test_returns_noop_when_all_disabled(self):
        manager = create_telemetry_manager(TelemetryConfig())
        assert isinstance(manager, NoOpTelemetryManager)

    def test_returns_manager_when_logging_enabled(self):
        manager = create_telemetry_manager(TelemetryConfig(enable_logging=True))
        assert isinstance(manager, TelemetryManager)

    def test_returns_manager_when_hooks_provided(self):
        manager = create_telemetry_manager(TelemetryConfig(hooks=[MagicMock()]))
        assert isinstance(manager, TelemetryManager)


class TestTelemetryManager:
    """Tests for TelemetryManager."""

    def test_trace_request_creates_context(self):
        manager = TelemetryManager(TelemetryConfig(enable_logging=True))

        with manager.trace_request(
            operation="datasets.publish",
            method="POST",
            url="https://dv.example.org/api/v1/datasets/42/actions/:publish?type=major",
            dataset_id="42",
            addressing="id",
        ) as ctx:
            assert ctx.operation == "datasets.publish"
            assert ctx.method == "POST"
            assert ctx.dataset_id == "42"
            assert ctx.addressing == "id"

    def test_hooks_dispatched_on_request_start_and_end(self):
        hook = MagicMock()
        manager = TelemetryManager(TelemetryConfig(hooks=[hook]))

        with manager.trace_request(operation="test", method="GET", url="https://test.org") as ctx:
            manager.record_response(ctx, status_code=200)

        hook.on_request_start.assert_called_once()
        hook.on_request_end.assert_called_once()
        response = hook.on_request_end.call_args[0][1]
        assert isinstance(response, ResponseContext)
        assert response.status_code == 200
        assert response.error is None

    def test_hooks_dispatched_on_request_error(self):
        hook = MagicMock()
        manager = TelemetryManager(TelemetryConfig(hooks=[hook]))

        with pytest.raises(ValueError):
            with manager.trace_request(operation="test", method="GET", url="https://test.org"):
                raise ValueError("Test error")

        hook.on_request_error.assert_called_once()

    def test_hook_errors_do_not_break_request(self):
        hook = MagicMock()
        hook.on_request_start.side_effect = Exception("Hook error")
        hook.on_request_end.side_effect = Exception("Hook error")
        manager = TelemetryManager(TelemetryConfig(hooks=[hook]))

        with manager.trace_request(operation="test", method="GET", url="https://test.org") as ctx:
            manager.record_response(ctx, status_code=200)

    def test_get_additional_headers_collects_from_hooks(self):
        hook1 = MagicMock()
        hook1.get_additional_headers.return_value = {"X-Custom-1": "value1"}
        hook2 = MagicMock()
        hook2.get_additional_headers.return_value = {"X-Custom-2": "value2"}
        manager = TelemetryManager(TelemetryConfig(hooks=[hook1, hook2]))

        assert manager.get_additional_headers() == {"X-Custom-1": "value1", "X-Custom-2": "value2"}

    def test_get_additional_headers_handles_hook_errors(self):
        hook = MagicMock()
        hook.get_additional_headers.side_effect = Exception("Hook error")
        manager = TelemetryManager(TelemetryConfig(hooks=[hook]))

        assert manager.get_additional_headers() == {}

    def test_failed_response_logged_as_warning(self, caplog):
        manager = TelemetryManager(TelemetryConfig(enable_logging=True, log_level="DEBUG"))
        ctx = RequestContext(method="GET", url="https://test.org", operation="datasets.view", dataset_id="42")

        with caplog.at_level(logging.DEBUG, logger="dataverse_dataset"):
            manager.record_response(ctx, status_code=404, error=RuntimeError("not found"))

        records = [r for r in caplog.records if r.name == "dataverse_dataset"]
        assert records[-1].levelno == logging.WARNING
        assert "datasets.view GET 404" in records[-1].getMessage()

    def test_successful_response_logged_as_debug(self, caplog):
        manager = TelemetryManager(TelemetryConfig(enable_logging=True, log_level="DEBUG"))
        ctx = RequestContext(method="GET", url="https://test.org", operation="datasets.view")

        with caplog.at_level(logging.DEBUG, logger="dataverse_dataset"):
            manager.record_response(ctx, status_code=200)

        records = [r for r in caplog.records if r.name == "dataverse_dataset"]
        assert records[-1].levelno == logging.DEBUG

    def test_one_log_record_per_request(self, caplog):
        manager = TelemetryManager(TelemetryConfig(enable_logging=True, log_level="DEBUG"))

        with caplog.at_level(logging.DEBUG, logger="dataverse_dataset"):
            with manager.trace_request("datasets.get_locks", "GET", "https://test.org", "doi:x", "persistentId") as ctx:
                manager.record_response(ctx, status_code=200)

        records = [r for r in caplog.records if r.name == "dataverse_dataset"]
        assert len(records) == 1
        assert records[0].dataset_id == "doi:x"
        assert records[0].addressing == "persistentId"

    def test_transport_failure_logged_once(self, caplog):
        manager = TelemetryManager(TelemetryConfig(enable_logging=True))

        with caplog.at_level(logging.DEBUG, logger="dataverse_dataset"):
            with pytest.raises(ConnectionError):
                with manager.trace_request("datasets.view", "GET", "https://test.org", "42", "id"):
                    raise ConnectionError("refused")

        records = [r for r in caplog.records if r.name == "dataverse_dataset"]
        assert len(records) == 1
        assert records[0].levelno == logging.WARNING
        assert "datasets.view GET failed" in records[0].getMessage()

    def test_request_context_attributes(self):
        ctx = RequestContext(
            method="PUT", url="https://test.org", operation="datasets.link", dataset_id="42", addressing="id"
        )
        assert ctx.attributes() == {
            "dataverse.operation": "datasets.link",
            "http.request.method": "PUT",
            "url.full": "https://test.org",
            "dataverse.dataset.id": "42",
            "dataverse.dataset.addressing": "id",
        }

    def test_request_context_attributes_without_dataset(self):
        ctx = RequestContext(method="GET", url="https://test.org", operation="test")
        assert "dataverse.dataset.id" not in ctx.attributes()

    def test_hook_with_partial_interface(self):
        class EndOnly:
            def __init__(self):
                self.seen = []

            def on_request_end(self, request, response):
                self.seen.append((request.dataset_id, response.status_code))

        hook = EndOnly()
        manager = TelemetryManager(TelemetryConfig(hooks=[hook]))

        with manager.trace_request("datasets.view", "GET", "https://test.org", "42") as ctx:
            manager.record_response(ctx, status_code=200)

        assert hook.seen == [("42", 200)]
        assert manager.get_additional_headers() == {}


class TestNoOpTelemetryManager:
    """Tests for NoOpTelemetryManager."""

    def test_trace_request_returns_context(self):
        manager = NoOpTelemetryManager()
        with manager.trace_request(operation="test", method="GET", url="https://test.org") as ctx:
            assert ctx.operation == "test"
            assert ctx.method == "GET"

    def test_record_response_is_noop(self):
        NoOpTelemetryManager().record_response(None, 200)

    def test_get_additional_headers_returns_empty(self):
        assert NoOpTelemetryManager().get_additional_headers() == {}


class TestOpenTelemetryIntegration:
    """Tests for OpenTelemetry integration."""

    @pytest.fixture
    def mock_otel(self):
        with patch("dataverse_dataset.core.telemetry.trace") as mock_trace, patch(
            "dataverse_dataset.core.telemetry.metrics"
        ) as mock_metrics, patch("dataverse_dataset.core.telemetry.Status") as mock_status, patch(
            "dataverse_dataset.core.telemetry.StatusCode"
        ) as mock_status_code:
            mock_tracer = MagicMock()
            mock_trace.get_tracer.return_value = mock_tracer
            mock_trace.SpanKind.CLIENT = "CLIENT"
            mock_span = MagicMock()
            mock_tracer.start_span.return_value = mock_span
            mock_meter = MagicMock()
            mock_metrics.get_meter.return_value = mock_meter
            mock_status_code.ERROR = "ERROR"
            yield {
                "trace": mock_trace,
                "metrics": mock_metrics,
                "tracer": mock_tracer,
                "meter": mock_meter,
                "span": mock_span,
                "status": mock_status,
            }

    def test_span_created_and_ended(self, mock_otel):
        manager = TelemetryManager(TelemetryConfig(enable_tracing=True))

        with manager.trace_request(
            operation="datasets.view",
            method="GET",
            url="https://test.org",
            dataset_id="doi:10.5072/FK2/ABC123",
            addressing="persistentId",
        ) as ctx:
            manager.record_response(ctx, status_code=200)

        mock_otel["tracer"].start_span.assert_called_once()
        call_args = mock_otel["tracer"].start_span.call_args
        assert call_args[0][0] == "Dataverse datasets.view"
        assert call_args[1]["attributes"]["dataverse.dataset.id"] == "doi:10.5072/FK2/ABC123"
        mock_otel["span"].set_attribute.assert_any_call("http.response.status_code", 200)
        mock_otel["span"].end.assert_called_once()

    def test_span_records_exception_on_error(self, mock_otel):
        manager = TelemetryManager(TelemetryConfig(enable_tracing=True))

        with pytest.raises(ValueError):
            with manager.trace_request(operation="test", method="GET", url="https://test.org"):
                raise ValueError("Test error")

        mock_otel["span"].record_exception.assert_called_once()
        mock_otel["span"].set_status.assert_called_once()

    def test_metrics_recorded(self, mock_otel):
        manager = TelemetryManager(TelemetryConfig(enable_metrics=True))
        meter = mock_otel["meter"]
        assert meter.create_histogram.called
        assert meter.create_counter.call_count == 2

        ctx = RequestContext(method="GET", url="https://test.org", operation="datasets.view")
        manager.record_response(ctx, status_code=500, error=RuntimeError("boom"))

        histogram = meter.create_histogram.return_value
        counter = meter.create_counter.return_value
        histogram.record.assert_called_once()
        assert counter.add.call_count == 2


class TestClientTelemetry:
    """Telemetry wired through a real dataset operation."""

    def test_hook_sees_dataset_request(self, http):
        hook = MagicMock()
        hook.get_additional_headers.return_value = {"X-Audit": "yes"}
        config = DataverseConfig(telemetry=TelemetryConfig(hooks=[hook]))
        client = DataverseClient("https://dv.example.org", "tok", config)
        client._get_api()._http = http
        http.queue(403, {"status": "ERROR", "message": "forbidden"})

        result = client.dataset("42").get_private_url()

        assert not result.ok
        assert http.last["headers"]["X-Audit"] == "yes"
        request_ctx, response_ctx = hook.on_request_end.call_args[0]
        assert request_ctx.operation == "datasets.get_private_url"
        assert request_ctx.dataset_id == "42"
        assert response_ctx.status_code == 403
        assert response_ctx.error is result.error

    def test_hook_sees_transport_error(self, http):
        import requests

        hook = MagicMock()
        hook.get_additional_headers.return_value = {}
        config = DataverseConfig(telemetry=TelemetryConfig(hooks=[hook]))
        client = DataverseClient("https://dv.example.org", "tok", config)
        client._get_api()._http = http
        http._responses.append(requests.exceptions.ConnectionError("refused"))

        result = client.dataset("42").view()

        assert result.error.code == "transport_error"
        hook.on_request_error.assert_called_once()
        hook.on_request_end.assert_not_called()
