"""OpenTelemetry tracing helpers.

Provides a thin wrapper around the OpenTelemetry API so the rest of the
codebase can call ``get_tracer()`` without caring whether the SDK is
installed.  When the SDK is *not* configured the API returns no-op
implementations.

Usage::

    from deepseek_agent.utils.telemetry import get_tracer

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("mcp.server.handle") as span:
        span.set_attribute(ATTR_RPC_METHOD, "tools/list")

To activate real tracing, call :func:`configure_telemetry` once at startup
(requires the ``otel`` extra: ``pip install deepseek-agent[otel]``).
"""

from __future__ import annotations

import sys
from typing import Any

from opentelemetry import trace

# ---------------------------------------------------------------------------
# Semantic attribute keys
# ---------------------------------------------------------------------------

ATTR_RPC_METHOD = "rpc.method"
ATTR_RPC_REQUEST_ID = "rpc.jsonrpc.request_id"
ATTR_RPC_ERROR_CODE = "rpc.jsonrpc.error_code"
ATTR_TOOL_NAME = "deepseek_agent.tool.name"
ATTR_TOOL_IS_ERROR = "deepseek_agent.tool.is_error"
ATTR_MODEL = "deepseek_agent.model"
ATTR_TOOL_CALLS = "deepseek_agent.tool_calls"

_INSTRUMENTATION_NAME = "deepseek_agent"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a :class:`~opentelemetry.trace.Tracer` for *name*.

    If the OpenTelemetry SDK has not been configured the returned tracer
    is a no-op.
    """
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    *,
    service_name: str = "deepseek-agent",
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Configure OpenTelemetry tracing (requires ``deepseek-agent[otel]``).

    Console spans are written to stderr: stdout belongs to the MCP wire
    protocol when running as a server.

    Raises
    ------
    ImportError
        If the ``opentelemetry-sdk`` package is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required for configure_telemetry(). "
            "Install it with: pip install deepseek-agent[otel]"
        )
        raise ImportError(msg) from exc

    resource = Resource.create({"service.name": service_name})  # pyright: ignore[reportUnknownVariableType,reportUnknownMemberType]
    provider = TracerProvider(resource=resource)  # pyright: ignore[reportUnknownVariableType]

    if export_to_console:
        _add_console_exporter(provider, SimpleSpanProcessor)

    if otlp_endpoint:
        _add_otlp_exporter(provider, BatchSpanProcessor, otlp_endpoint)

    trace.set_tracer_provider(provider)  # pyright: ignore[reportUnknownArgumentType]


def _add_console_exporter(provider: Any, processor_cls: Any) -> None:
    from opentelemetry.sdk.trace.export import ConsoleSpanExporter  # pyright: ignore[reportMissingImports,reportUnknownVariableType]

    provider.add_span_processor(processor_cls(ConsoleSpanExporter(out=sys.stderr)))


def _add_otlp_exporter(provider: Any, processor_cls: Any, endpoint: str) -> None:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
    except ImportError as exc:
        msg = (
            "opentelemetry-exporter-otlp is required for OTLP export. "
            "Install it with: pip install deepseek-agent[otel]"
        )
        raise ImportError(msg) from exc

    provider.add_span_processor(processor_cls(OTLPSpanExporter(endpoint=endpoint)))
