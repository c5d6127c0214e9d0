"""
tfviz CLI entry point.
"""
import os
import sys
from collections import Counter
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from tfviz import __version__
from tfviz.config import ConfigError, load_config
from tfviz.diagnostics import Diagnostics
from tfviz.models.graph import Graph
from tfviz.models.module import Module
from tfviz.parsers.terraform import TerraformLoadError, load_module
from tfviz.reporters import dot, image, json_reporter
from tfviz.topology import engine

_TEXT_FORMATS = ("dot", "json")


def _print_banner(no_color: bool = False) -> None:
    c = Console(stderr=True, no_color=no_color)
    c.print(f"[bold blue]tfviz[/bold blue]  [dim]Terraform network topology  v{__version__}[/dim]\n")


def _print_summary_table(module: Module, graph: Graph, no_color: bool) -> None:
    """Print resource counts and graph size to stderr."""
    tbl = Table(title="Topology Summary", show_header=True, header_style="bold")
    tbl.add_column("Resource type", width=28)
    tbl.add_column("Count", justify="right", width=7)

    counts = Counter(r.resource_type for r in module.managed_resources)
    for resource_type, count in sorted(counts.items()):
        tbl.add_row(resource_type, str(count))
    tbl.add_section()
    tbl.add_row("[bold]clusters[/bold]", str(len(graph.clusters)))
    tbl.add_row("[bold]nodes[/bold]", str(len(graph.nodes)))
    tbl.add_row("[bold]edges[/bold]", str(len(graph.edges)))

    Console(stderr=True, no_color=no_color).print(tbl)


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(__version__)
@click.pass_context
def cli(ctx):
    """tfviz — draw the network topology of a Terraform AWS module."""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()


@cli.command()
@click.argument("input_path", default=".", type=click.Path())
@click.option(
    "--output", "-o",
    type=click.Path(),
    default=None,
    help="Write the graph to this file (default: stdout, text formats only).",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(list(_TEXT_FORMATS + image.IMAGE_FORMATS), case_sensitive=False),
    default="dot",
    show_default=True,
    help="Output format.",
)
@click.option(
    "--config", "config_path",
    type=click.Path(),
    default=None,
    help="YAML configuration file (default: ./tfviz.yaml when present).",
)
@click.option("--ignore-ingress", is_flag=True, default=False, help="Do not draw edges for ingress rules.")
@click.option("--ignore-egress", is_flag=True, default=False, help="Do not draw edges for egress rules.")
@click.option("--ignore-warnings", is_flag=True, default=False, help="Hide [WARNING] diagnostics.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Print every graph operation.")
@click.option("--summary", is_flag=True, default=False, help="Print a resource / graph summary table.")
@click.option("--no-color", is_flag=True, default=False, help="Disable rich terminal color output.")
def render(
    input_path: str,
    output: Optional[str],
    output_format: str,
    config_path: Optional[str],
    ignore_ingress: bool,
    ignore_egress: bool,
    ignore_warnings: bool,
    verbose: bool,
    summary: bool,
    no_color: bool,
) -> None:
    """
    Build the topology graph of a Terraform file or directory.

    INPUT_PATH defaults to the current directory.
    """
    _print_banner(no_color)
    stderr = Console(stderr=True, no_color=no_color)
    fmt = output_format.lower()

    # 1. Setup: configuration, output checks, module loading
    try:
        # flags only switch options on; unset flags keep the file value
        config = load_config(config_path).merged(
            ignore_ingress=ignore_ingress or None,
            ignore_egress=ignore_egress or None,
            ignore_warnings=ignore_warnings or None,
            verbose=verbose or None,
        )
    except ConfigError as exc:
        stderr.print(f"[red]Config error:[/red] {exc}")
        sys.exit(1)

    if output and os.path.exists(output):
        stderr.print(f"[red]File {output} already exists. Quitting...[/red]")
        sys.exit(1)
    if fmt in image.IMAGE_FORMATS and not output:
        stderr.print(f"[red]--output is required for the {fmt} format.[/red]")
        sys.exit(1)

    diags = Diagnostics(
        verbose=config.verbose,
        ignore_warnings=config.ignore_warnings,
        console=Console(stderr=True, no_color=no_color),
    )

    try:
        module = load_module(input_path, diags)
    except TerraformLoadError as exc:
        stderr.print(f"[red]Load error:[/red] {exc}")
        sys.exit(1)

    stderr.print(f"Found [bold]{len(module.managed_resources)}[/bold] resources in {len(module.files)} file(s).")

    # 2. Synthesis
    graph = engine.run(module, config, diags)

    if summary or output:
        _print_summary_table(module, graph, no_color)

    # 3. Export
    if fmt == "json":
        content = json_reporter.build_report(graph, input_path)
    elif fmt == "dot":
        content = dot.build_report(graph)
    else:
        try:
            content = image.render(graph, fmt)
        except image.ExportError as exc:
            stderr.print(f"[red]Export error:[/red] {exc}")
            sys.exit(1)

    if output:
        if isinstance(content, bytes):
            with open(output, "wb") as fh:
                fh.write(content)
        else:
            with open(output, "w", encoding="utf-8", newline="\n") as fh:
                fh.write(content)
        stderr.print(f"Graph written to [bold]{output}[/bold]")
    else:
        click.echo(content)

    sys.exit(0)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
