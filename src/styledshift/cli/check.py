"""CLI command: styledshift check -- validate and dry-run lowering for a file."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from styledshift.config import LoweringConfig
from styledshift.lowering import lower as run_lower
from styledshift.model.diagnostic import Severity
from styledshift.parser import ParseError, scan_source
from styledshift.validation import validate as run_validate


@click.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def check(config: LoweringConfig, source: str) -> None:
    """Validate SOURCE and report which components would bail.

    Exits with code 1 if validation finds errors or any component bails.
    """
    path = Path(source)
    try:
        scanned = scan_source(path.read_text(encoding="utf-8"), str(path), config)
    except ParseError as exc:
        click.echo(f"Parse error: {exc}", err=True)
        sys.exit(1)

    diagnostics = run_validate(scanned)
    result = run_lower(
        scanned.declarations,
        config=config,
        imports=scanned.imports,
        constants=scanned.constants,
        keyframes=scanned.keyframes,
        file_path=str(path),
    )
    diagnostics.extend(result.diagnostics)

    for diag in diagnostics:
        click.echo(str(diag))

    errors = [d for d in diagnostics if d.severity is Severity.ERROR]
    warnings = [d for d in diagnostics if d.severity is Severity.WARNING]
    click.echo()
    click.echo(
        f"Summary: {len(result.lowered)} lowered, {len(result.bailed)} bailed, "
        f"{len(errors)} error(s), {len(warnings)} warning(s)"
    )

    if errors or result.bailed:
        sys.exit(1)
    sys.exit(0)
