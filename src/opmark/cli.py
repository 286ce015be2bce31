"""Click CLI for the OpMark parser.

Commands:
    parse   — Parse an OpMark file to IR JSON
    stats   — Print page/block counts and diagnostics
    check   — Validate a saved IR JSON file
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from opmark.config import Config
from opmark.exceptions import OpMarkError
from opmark.pipeline import Pipeline


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to a YAML configuration file.",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """OpMark presentation markup parser."""
    try:
        config = Config.load(config_path)
    except OpMarkError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)
    if verbose:
        config.verbose = True

    logging.basicConfig(
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    # basicConfig leaves an already configured root logger alone
    logging.getLogger().setLevel(logging.DEBUG if config.verbose else logging.WARNING)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["pipeline"] = Pipeline(config)


def _fail_on_warnings(pipeline: Pipeline) -> None:
    rpt = pipeline.last_report
    if pipeline.config.report.fail_on_warnings and rpt and rpt.diagnostics:
        click.echo(f"Error: {len(rpt.diagnostics)} warning(s) reported", err=True)
        raise SystemExit(1)


@main.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path))
@click.argument("output_json", type=click.Path(path_type=Path), required=False)
@click.option("--report", is_flag=True, help="Save parse report JSON alongside output.")
@click.option(
    "--report-path",
    type=click.Path(path_type=Path),
    default=None,
    help="Custom path for the report JSON file.",
)
@click.pass_context
def parse(
    ctx: click.Context,
    input_file: Path,
    output_json: Path | None,
    report: bool,
    report_path: Path | None,
) -> None:
    """Parse an OpMark file and write its IR as JSON (stdout by default)."""
    pipeline: Pipeline = ctx.obj["pipeline"]

    try:
        if output_json is None:
            click.echo(pipeline.inspect(input_file))
        else:
            result = pipeline.convert(
                input_file,
                output_json,
                save_report=report,
                report_path=report_path,
            )
            click.echo(f"Generated: {result}")
    except OpMarkError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)

    _fail_on_warnings(pipeline)


@main.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def stats(ctx: click.Context, input_file: Path) -> None:
    """Print page and block counts for an OpMark file."""
    pipeline: Pipeline = ctx.obj["pipeline"]

    try:
        pipeline.parse(input_file)
    except OpMarkError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)

    rpt = pipeline.last_report
    click.echo(
        f"{rpt.page_count} pages ({rpt.empty_page_count} empty), "
        f"{rpt.block_count} blocks: {rpt.heading_count} headings, "
        f"{rpt.paragraph_count} paragraphs, {rpt.list_count} lists, "
        f"{rpt.image_count} images, {rpt.link_count} links"
    )
    for diag in rpt.diagnostics:
        click.echo(f"Warning: {diag}")

    _fail_on_warnings(pipeline)


@main.command()
@click.argument("ir_json", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def check(ctx: click.Context, ir_json: Path) -> None:
    """Validate a saved IR JSON file."""
    pipeline: Pipeline = ctx.obj["pipeline"]

    try:
        doc = pipeline.load_ir(ir_json)
    except OpMarkError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)

    click.echo(f"OK: {len(doc.pages)} pages, {len(list(doc.iter_blocks()))} blocks")
