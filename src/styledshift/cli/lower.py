"""CLI command: styledshift lower -- lower a source file into StyleX styles."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from styledshift.config import LoweringConfig
from styledshift.lowering import lower as run_lower
from styledshift.parser import ParseError, scan_source
from styledshift.render import render_js, render_json


@click.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Emit the result as JSON.")
@click.option(
    "--output", "-o", type=click.Path(dir_okay=False), help="Write output to a file."
)
@click.option("--strict", is_flag=True, help="Exit 1 if any component bails.")
@click.pass_obj
def lower(
    config: LoweringConfig, source: str, as_json: bool, output: str | None, strict: bool
) -> None:
    """Lower every styled declaration in SOURCE.

    Components that cannot be lowered safely are left untouched and
    reported on stderr.
    """
    path = Path(source)
    try:
        scanned = scan_source(path.read_text(encoding="utf-8"), str(path), config)
    except ParseError as exc:
        click.echo(f"Parse error: {exc}", err=True)
        sys.exit(1)

    result = run_lower(
        scanned.declarations,
        config=config,
        imports=scanned.imports,
        constants=scanned.constants,
        keyframes=scanned.keyframes,
        file_path=str(path),
    )
    text = render_json(result) if as_json else render_js(result, config)

    if output:
        Path(output).write_text(text, encoding="utf-8")
        click.echo(f"Wrote {output} ({len(result.lowered)} component(s))")
    else:
        click.echo(text, nl=False)

    for diag in result.diagnostics:
        click.echo(str(diag), err=True)

    if strict and result.bailed:
        sys.exit(1)
