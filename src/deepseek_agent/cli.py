"""deepseek-agent CLI entrypoint."""

from __future__ import annotations

import click

from deepseek_agent import __version__
from deepseek_agent.cli_commands._output import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="deepseek-agent")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option("--telemetry", is_flag=True, help="Export trace spans to stderr.")
@click.option(
    "--otlp-endpoint",
    envvar="OTEL_EXPORTER_OTLP_ENDPOINT",
    default=None,
    help="Export trace spans to an OTLP collector (e.g. http://localhost:4317).",
)
def main(verbose: bool, telemetry: bool, otlp_endpoint: str | None) -> None:
    """deepseek-agent — weather and search tools for an LLM, served over MCP."""
    configure_logging(verbose=verbose)
    if telemetry or otlp_endpoint:
        from deepseek_agent.utils.telemetry import configure_telemetry

        configure_telemetry(export_to_console=telemetry, otlp_endpoint=otlp_endpoint)


# Register subcommands
from deepseek_agent.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
