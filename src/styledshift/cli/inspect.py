"""CLI command: styledshift inspect -- display scanned declarations."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from styledshift.config import LoweringConfig
from styledshift.model.expr import to_source
from styledshift.parser import ParseError, scan_source


@click.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def inspect(config: LoweringConfig, source: str) -> None:
    """Scan SOURCE and display its styled declarations.

    Shows each declaration's base, rules (with at-rules) and slot expressions,
    then each keyframes declaration's frames.
    """
    path = Path(source)
    try:
        scanned = scan_source(path.read_text(encoding="utf-8"), str(path), config)
    except ParseError as exc:
        click.echo(f"Parse error: {exc}", err=True)
        sys.exit(1)

    click.echo(f"File:         {path}")
    click.echo(f"Imports:      {len(scanned.imports)}")
    click.echo(f"Declarations: {len(scanned.declarations)}")
    click.echo(f"Keyframes:    {len(scanned.keyframes)}")
    click.echo()

    for decl in scanned.declarations:
        if decl.is_css_helper:
            kind = "css"
        elif decl.base is not None and decl.base.is_intrinsic:
            kind = f"styled.{decl.base.tag}"
        else:
            kind = f"styled({decl.base.component if decl.base else '?'})"
        click.echo(f"{decl.name}  {kind}")
        if decl.parse_error:
            click.echo(f"  parse error: {decl.parse_error}")
        for rule in decl.rules:
            at = " ".join(rule.at_rules)
            head = f"{at} {rule.selector}" if at else rule.selector
            click.echo(f"  {head}  ({len(rule.declarations)} declaration(s))")
        for slot_id, expr in enumerate(decl.slots):
            text = to_source(expr)
            text = text[:60] + "..." if len(text) > 60 else text
            click.echo(f"  slot {slot_id}: {expr.kind}  {text}")
        for prop, values in decl.prop_types.items():
            click.echo(f"  {prop}: {' | '.join(values)}")
        click.echo()

    for animation in scanned.keyframes:
        click.echo(f"{animation.name}  keyframes")
        if animation.parse_error:
            click.echo(f"  parse error: {animation.parse_error}")
        for selector, declarations in animation.frames:
            click.echo(f"  {selector}  ({len(declarations)} declaration(s))")
        click.echo()
