"""Command-line interface for JMeter DSL Code Generator.

This module provides a Click-based CLI for converting JMeter JMX test
plans into jmeter-java-dsl test classes, and for reconstructing thread
group calls from load stages.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
import questionary
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.syntax import Syntax

from jmeter_codegen import __version__
from jmeter_codegen.core.builders.thread_group import Stage, reconstruct_thread_group
from jmeter_codegen.core.generator import DslCodeGenerator
from jmeter_codegen.core.settings import load_settings
from jmeter_codegen.exceptions import CodegenException

console = Console()


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _find_jmx_files(directory: str = ".") -> list[str]:
    return sorted(str(path) for path in Path(directory).glob("*.jmx"))


def _select_jmx_file() -> str:
    """Pick the JMX file of the working directory, asking when there are several."""
    jmx_files = _find_jmx_files()
    if not jmx_files:
        console.print("\n[bold red]Error:[/bold red] No JMX file found in current directory.")
        console.print("Please specify a JMX file path.")
        sys.exit(1)
    if len(jmx_files) == 1:
        console.print(f"[green]Using JMX file: {jmx_files[0]}[/green]")
        return jmx_files[0]

    jmx_path = questionary.select(
        "Multiple JMX files found. Select one:",
        choices=jmx_files,
    ).ask()
    if not jmx_path:
        console.print("[yellow]Cancelled.[/yellow]")
        sys.exit(0)
    return jmx_path


def parse_stage(value: str) -> Stage:
    """Parse a THREADS[:DURATION[:ITERATIONS]] stage option.

    Durations are seconds, and any part may be a JMeter expression.

    Raises:
        click.BadParameter: If the value has more than three parts, no threads
            or a fractional number
    """
    parts = value.split(":")
    if len(parts) > 3 or not parts[0].strip():
        raise click.BadParameter(
            f"Invalid stage '{value}', expected THREADS[:DURATION[:ITERATIONS]]"
        )
    parts += [""] * (3 - len(parts))
    try:
        return Stage.from_values(parts[0], parts[1], parts[2])
    except ValueError as e:
        raise click.BadParameter(f"Invalid stage '{value}': {e}") from e


@click.group()
@click.version_option(version=__version__, prog_name="jmeter-codegen")
def cli():
    """JMeter DSL Code Generator - Convert JMeter test plans into jmeter-java-dsl code.

    This tool reads JMX test plans and generates equivalent Java test classes
    using jmeter-java-dsl.
    """
    pass


@cli.command()
@click.argument("jmx_path", required=False, type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Output Java file (default: print to console)",
)
@click.option("--class-name", help="Name of generated test class (default: PerformanceTest)")
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False),
    help="Settings file (default: jmeter-codegen.yaml in current directory)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logs")
def convert(
    jmx_path: Optional[str],
    output: Optional[str],
    class_name: Optional[str],
    config: Optional[str],
    verbose: bool,
):
    """Convert a JMX test plan into a jmeter-java-dsl test class.

    Without JMX_PATH, the JMX file in the current directory is used, asking
    which one to use when there are several.

    Example:
        jmeter-codegen convert load-test.jmx
        jmeter-codegen convert load-test.jmx --output src/test/java/LoadTest.java
        jmeter-codegen convert --class-name CheckoutTest
    """
    _configure_logging(verbose)
    try:
        settings = load_settings(config).with_overrides(class_name=class_name)
        if jmx_path is None:
            jmx_path = _select_jmx_file()

        console.print(f"[bold]Converting JMX file:[/bold] {jmx_path}")
        result = DslCodeGenerator(settings).generate_from_file(jmx_path)

        for warning in result.warnings:
            console.print(f"[yellow]Warning:[/yellow] {warning}")

        if output:
            output_path = Path(output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(result.code, encoding="utf-8")
            console.print(
                Panel(
                    f"[bold green]DSL code generated successfully![/bold green]\n\n"
                    f"[cyan]File:[/cyan] {output_path}\n"
                    f"[cyan]Class:[/cyan] {settings.class_name}\n"
                    f"[cyan]Elements converted:[/cyan] {result.elements_converted}\n"
                    f"[cyan]Warnings:[/cyan] {len(result.warnings)}",
                    title="Success",
                    border_style="green",
                )
            )
        else:
            console.print(Syntax(result.code, "java", theme="ansi_dark"))

    except CodegenException as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        sys.exit(1)


@cli.command("thread-group")
@click.option(
    "--stage",
    "stages",
    multiple=True,
    help="Load stage as THREADS[:DURATION[:ITERATIONS]], repeatable (e.g. 0:30 10:60 10:300)",
)
@click.option("--name", help="Thread group name (default: Thread Group)")
def thread_group(stages: tuple[str, ...], name: Optional[str]):
    """Print the threadGroup DSL call equivalent to a list of load stages.

    Example:
        jmeter-codegen thread-group --stage 10:60
        jmeter-codegen thread-group --stage 0:30 --stage 20::100
        jmeter-codegen thread-group --stage '10:${__P(RAMP)}'
    """
    try:
        parsed = [parse_stage(stage) for stage in stages]
        call = reconstruct_thread_group(parsed, name)
        console.print(Syntax(call.build_code(), "java", theme="ansi_dark"))
    except CodegenException as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        sys.exit(1)


@cli.command()
def mcp():
    """Start MCP Server mode for AI assistant integration.

    Launches the MCP (Model Context Protocol) server that allows
    AI assistants to convert JMeter test plans into DSL code.

    Example:
        jmeter-codegen mcp
    """
    try:
        from jmeter_codegen.mcp_server import run_server

        Console(stderr=True).print(
            Panel(
                "[bold green]Starting MCP Server...[/bold green]\n\n"
                "The server is now running and ready to accept connections.\n\n"
                "[dim]Press Ctrl+C to stop the server[/dim]",
                title="MCP Server",
                border_style="green",
            )
        )

        run_server()

    except KeyboardInterrupt:
        console.print("\n[yellow]MCP Server stopped by user[/yellow]")


def main():
    """Entry point for CLI application."""
    cli()


if __name__ == "__main__":
    main()
