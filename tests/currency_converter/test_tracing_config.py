"""Tests for tracing configuration."""

from unittest.mock import patch

from opentelemetry.sdk.trace import TracerProvider

from currency_converter.tracing_config import configure_tracing


class TestConfigureTracing:
    """Test tracer provider setup."""

    def test_without_endpoint(self, monkeypatch):
        """Test no exporter is installed without an endpoint."""
        monkeypatch.delenv("OTEL_EXPORTER_OTLP_ENDPOINT", raising=False)
        with (
            patch("currency_converter.tracing_config.trace.set_tracer_provider") as mock_set,
            patch("currency_converter.tracing_config.OTLPSpanExporter") as mock_exporter,
        ):
            provider = configure_tracing("currency-converter")

        assert isinstance(provider, TracerProvider)
        mock_set.assert_called_once_with(provider)
        mock_exporter.assert_not_called()
        assert provider.resource.attributes["service.name"] == "currency-converter"

    def test_with_endpoint(self):
        """Test an OTLP exporter is installed when an endpoint is given."""
        with (
            patch("currency_converter.tracing_config.trace.set_tracer_provider"),
            patch("currency_converter.tracing_config.OTLPSpanExporter") as mock_exporter,
            patch("currency_converter.tracing_config.BatchSpanProcessor") as mock_processor,
        ):
            configure_tracing("currency-converter", "http://collector:4317")

        mock_exporter.assert_called_once_with(endpoint="http://collector:4317", insecure=True)
        mock_processor.assert_called_once_with(mock_exporter.return_value)
