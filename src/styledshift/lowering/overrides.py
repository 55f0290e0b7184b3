"""Cross-component overrides: styles a child takes on inside a marked ancestor."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from styledshift.lowering.accumulator import DEFAULT, OverrideDraft
from styledshift.lowering.naming import to_style_key
from styledshift.model.context import LoweringContext
from styledshift.model.diagnostic import Diagnostic, Severity
from styledshift.model.result import AncestorKey

logger = logging.getLogger(__name__)


def override_key(child: str, parent: str) -> str:
    """``(Icon, Button)`` -> ``iconInButton``."""
    return f"{to_style_key(child)}In{parent}"


def build_override_style(draft: OverrideDraft, child_base: dict[str, Any]) -> dict[str, Any]:
    """Finalize a draft into a style object.

    Unconditioned-only properties stay plain values; the rest become
    ``{default: base, when.ancestor(pseudo): value}``. Backfilled defaults
    are re-read from the child's final base values.
    """
    base = draft.buckets.get(None, {})
    style: dict[str, Any] = {}
    for prop, value in base.items():
        if prop in draft.backfilled:
            value = child_base.get(prop, value)
        conditional = {
            AncestorKey(pseudo): bucket[prop]
            for pseudo, bucket in draft.buckets.items()
            if pseudo is not None and prop in bucket
        }
        style[prop] = {DEFAULT: value, **conditional} if conditional else value
    return style


def finalize_overrides(run: LoweringContext) -> None:
    """Write every override whose child and parent were both lowered.

    A dropped override is reported as a warning on whichever side did lower.
    """
    for key, draft in run.overrides.items():
        missing = [n for n in (draft.child, draft.parent) if n not in run.lowered]
        if missing:
            logger.info("Skipping override %s: %s not lowered", key, ", ".join(missing))
            for name in (draft.child, draft.parent):
                if name in run.lowered:
                    run.diagnostics.append(
                        Diagnostic(
                            severity=Severity.WARNING,
                            type=f"Override '{key}' dropped: {', '.join(missing)} not lowered",
                            component=name,
                            location=run.declarations[name].location,
                            context={"child": draft.child, "parent": draft.parent},
                        )
                    )
            continue
        final_key, n = key, 2
        while final_key in run.results:
            final_key, n = f"{key}{n}", n + 1
        run.results.set(final_key, build_override_style(draft, run.base_values.get(draft.child, {})))
        child = run.lowered[draft.child]
        run.lowered[draft.child] = dataclasses.replace(
            child, overrides=child.overrides + (final_key,)
        )
    for name in sorted(run.ancestor_markers):
        record = run.lowered.get(name)
        if record is not None and not record.ancestor_marker:
            run.lowered[name] = dataclasses.replace(record, ancestor_marker=True)
