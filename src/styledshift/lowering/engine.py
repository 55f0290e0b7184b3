"""Lowering engine: walks each component's rules and commits its styles."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from styledshift.adapter import MappingAdapter, SelectorContext, ValueAdapter
from styledshift.config import LoweringConfig
from styledshift.css.props import expand_declaration
from styledshift.lowering.accumulator import Accumulator, OverrideDraft, Scope, StyleBuilder
from styledshift.lowering.bail import BailController, BailSignal
from styledshift.lowering.mixins import compose_mixin
from styledshift.lowering.naming import capitalize, suffix_from_condition, to_style_key
from styledshift.lowering.overrides import finalize_overrides, override_key
from styledshift.lowering.recognizers import DeclarationContext, Recognizer, run_chain
from styledshift.lowering.recognizers.base import variable_entries
from styledshift.lowering.synthesis import Synthesis, synthesize
from styledshift.model.context import LoweringContext
from styledshift.model.diagnostic import BailCategory, DiagnosticLog, Severity
from styledshift.model.expr import Identifier, member_path
from styledshift.model.outcome import (
    ComposeMixin,
    EmitInlineStyleValue,
    EmitStyleFunction,
    Expand,
    KeepOriginal,
    Outcome,
    ResolvedStyles,
    ResolvedValue,
    SplitVariants,
)
from styledshift.model.result import (
    ComputedKey,
    ImportSpec,
    InlineStyleProp,
    Keyframes,
    LoweredComponent,
    ResultMap,
)
from styledshift.model.rules import Declaration, KeyframesDeclaration, Rule, StyledDeclaration
from styledshift.parser.source import scan_source
from styledshift.parser.template import SLOT_RE
from styledshift.selectors import (
    ATTRIBUTE_BASE_TAGS,
    AdjacentSibling,
    AncestorOf,
    Attribute,
    Base,
    DescendantOf,
    GeneralSiblingAfterClass,
    PseudoClasses,
    PseudoElement,
    Unsupported,
    classify,
    component_marker,
)

logger = logging.getLogger(__name__)

_SLOT_SELECTOR_RE = re.compile(r"&\s+__SLOT_(\d+)__")


@dataclass
class LoweringResult:
    """What one lowering run produced.

    Attributes:
        results: Style key to style object, style function or dimension.
        lowered: Successfully lowered components by name.
        diagnostics: Every finding, bails included.
        bailed: Names of components left untouched.
    """

    results: ResultMap
    lowered: dict[str, LoweredComponent]
    diagnostics: DiagnosticLog
    bailed: set[str] = field(default_factory=set)

    @property
    def ok(self) -> bool:
        return not self.bailed


# ---------------------------------------------------------------------------
# Rule targets
# ---------------------------------------------------------------------------


@dataclass
class _Target:
    """Where a rule's declarations land.

    ``main`` writes into the component's own style (or its variants and
    style functions); the other kinds only take resolved values.
    """

    kind: str
    scope: Scope
    builder: StyleBuilder | None = None
    override: OverrideDraft | None = None
    pseudo: str | None = None
    child_base: Callable[[str], Any] | None = None

    def set(self, prop: str, value: Any) -> None:
        if self.override is not None:
            base = self.child_base(prop) if self.child_base else None
            self.override.set(prop, value, self.pseudo, base)
        else:
            assert self.builder is not None
            self.builder.set(prop, value, self.scope)


def _selector_import(
    slot_id: int, decl: StyledDeclaration, run: LoweringContext
) -> tuple[ComputedKey, tuple[ImportSpec, ...]]:
    """Resolve an interpolated media selector through the adapter."""
    expr = decl.slot(slot_id)
    path = member_path(expr) if expr is not None else None
    binding = run.import_for(path[0]) if path else None
    if binding is None:
        raise BailSignal(BailCategory.UNSUPPORTED_SELECTOR, "interpolated selector")
    context = SelectorContext(binding.imported, binding.source, ".".join(path[1:]) or None)  # type: ignore[index]
    result = run.adapter.resolve_selector(context)
    if result is None:
        raise BailSignal(
            BailCategory.ADAPTER_FAILURE,
            f"Adapter resolveSelector returned undefined for {'.'.join(path)}",  # type: ignore[arg-type]
        )
    if result.kind != "media":
        raise BailSignal(BailCategory.UNSUPPORTED_SELECTOR, f"unsupported selector kind {result.kind}")
    return ComputedKey(result.expr), result.imports


def _media(
    at_rules: tuple[str, ...], decl: StyledDeclaration, run: LoweringContext, acc: Accumulator
) -> str | ComputedKey | None:
    media: str | ComputedKey | None = None
    for at_rule in at_rules:
        name = at_rule.split(None, 1)[0]
        if name != "@media":
            raise BailSignal(BailCategory.UNSUPPORTED_SELECTOR, f"unsupported at-rule {name}")
        if media is not None:
            raise BailSignal(BailCategory.UNSUPPORTED_SELECTOR, "nested @media rules")
        query = at_rule[len("@media"):].strip()
        slot = SLOT_RE.fullmatch(query)
        if slot:
            media, imports = _selector_import(int(slot.group(1)), decl, run)
            acc.add_imports(imports)
        elif SLOT_RE.search(query):
            raise BailSignal(BailCategory.UNSUPPORTED_SELECTOR, "interpolated selector")
        else:
            media = "@media " + query
    return media


def _mark_components(selector: str, decl: StyledDeclaration, run: LoweringContext) -> str:
    def repl(match: re.Match[str]) -> str:
        expr = decl.slot(int(match.group(1)))
        if isinstance(expr, Identifier) and expr.name in run.declarations:
            return component_marker(expr.name)
        return match.group(0)

    return SLOT_RE.sub(repl, selector)


def _target_for(
    rule: Rule, decl: StyledDeclaration, acc: Accumulator, run: LoweringContext
) -> _Target:
    media = _media(rule.at_rules, decl, run, acc)
    selector = _mark_components(rule.selector, decl, run)
    slot_selector = _SLOT_SELECTOR_RE.fullmatch(selector)
    if slot_selector:
        if media is not None:
            raise BailSignal(BailCategory.UNSUPPORTED_SELECTOR, "nested @media rules")
        media, imports = _selector_import(int(slot_selector.group(1)), decl, run)
        acc.add_imports(imports)
        selector = "&"

    shape = classify(selector)
    if isinstance(shape, Unsupported):
        raise BailSignal(BailCategory.UNSUPPORTED_SELECTOR, shape.reason)
    if isinstance(shape, Base):
        return _Target("main", Scope(media=media), acc.style)
    if isinstance(shape, PseudoClasses):
        return _Target("main", Scope(shape.pseudos, media), acc.style)
    if isinstance(shape, PseudoElement):
        return _Target("main", Scope(media=media, pseudo_element=shape.name), acc.style)
    if isinstance(shape, Attribute):
        tag = decl.base.tag if decl.base is not None else None
        if tag != ATTRIBUTE_BASE_TAGS[shape.kind]:
            raise BailSignal(
                BailCategory.UNSUPPORTED_SELECTOR, "attribute selector on unsupported element"
            )
        acc.needs_wrapper = True
        builder = acc.attribute(shape.kind, acc.style_key + shape.suffix)
        return _Target("attribute", Scope(media=media, pseudo_element=shape.pseudo_element), builder)
    if isinstance(shape, AdjacentSibling):
        acc.needs_wrapper = True
        builder = acc.sibling("adjacent", f"{acc.style_key}AdjacentSibling")
        return _Target("sibling", Scope(media=media), builder)
    if isinstance(shape, GeneralSiblingAfterClass):
        acc.needs_wrapper = True
        suffix = "".join(capitalize(p) for p in re.split(r"[-_]+", shape.class_name) if p)
        builder = acc.sibling(f"after:{shape.class_name}", f"{acc.style_key}SiblingAfter{suffix}")
        return _Target("sibling", Scope(media=media), builder)

    assert isinstance(shape, (DescendantOf, AncestorOf))
    if shape.component not in run.declarations:
        raise BailSignal(BailCategory.UNSUPPORTED_SELECTOR, "unknown component selector")
    if run.is_bailed(shape.component):
        raise BailSignal(
            BailCategory.UNSAFE_COMPOSITION,
            f"Component '{shape.component}' was not lowered (it bailed)",
            selector=rule.selector,
        )
    if media is not None:
        raise BailSignal(
            BailCategory.CONTEXT_LOSS, "@media inside a cross-component selector"
        )
    if isinstance(shape, DescendantOf):
        child, parent = decl.name, shape.component
        child_base: Callable[[str], Any] = acc.style.default_for
    else:
        child, parent = shape.component, decl.name
        child_base = lambda prop: run.base_values.get(child, {}).get(prop)  # noqa: E731
    acc.marked_parents.add(parent)
    draft = acc.override(override_key(child, parent), child, parent)
    return _Target("override", Scope(), override=draft, pseudo=shape.pseudo, child_base=child_base)


# ---------------------------------------------------------------------------
# Outcome application
# ---------------------------------------------------------------------------


def _set_branch(
    builder: StyleBuilder, entries: Iterable[tuple[str, Any, tuple[str, ...]]], scope: Scope
) -> None:
    for prop, value, pseudos in entries:
        builder.set(prop, value, Scope(pseudos or scope.pseudos, scope.media, scope.pseudo_element))


def _apply_split(outcome: SplitVariants, scope: Scope, acc: Accumulator) -> None:
    """One negated arm next to positive arms merges into the style itself."""
    negated = [b for b in outcome.branches if b.is_negated]
    positive = [b for b in outcome.branches if not b.is_negated]
    if len(negated) == 1 and positive:
        _set_branch(acc.style, negated[0].entries, scope)
        buckets = positive
    else:
        buckets = list(outcome.branches)
    for branch in buckets:
        _set_branch(acc.variant(branch.when), branch.entries, scope)
    acc.drop_props(outcome.props)


def _apply(
    outcome: Outcome,
    dctx: DeclarationContext,
    target: _Target,
    acc: Accumulator,
    run: LoweringContext,
) -> None:
    if isinstance(outcome, KeepOriginal):
        raise BailSignal(outcome.category, outcome.reason)
    if target.kind != "main" and not isinstance(outcome, (ResolvedValue, Expand)):
        raise BailSignal(
            BailCategory.CONTEXT_LOSS,
            f"Dynamic styles in {target.kind} selectors are not supported",
        )
    scope = dctx.scope
    if isinstance(outcome, ResolvedValue):
        target.set(dctx.output_property(), outcome.value)
        acc.add_imports(outcome.imports)
    elif isinstance(outcome, Expand):
        for prop, value in outcome.values:
            target.set(prop, value)
        acc.add_imports(outcome.imports)
    elif isinstance(outcome, ResolvedStyles):
        if not scope.is_base:
            raise BailSignal(
                BailCategory.CONTEXT_LOSS,
                "Resolved style objects are only valid at the base selector",
            )
        acc.external_styles.append((outcome.expr, acc.has_base_styles))
        acc.add_imports(outcome.imports)
    elif isinstance(outcome, ComposeMixin):
        if not scope.is_base:
            raise BailSignal(
                BailCategory.CONTEXT_LOSS, "Mixins are only supported at the base selector"
            )
        compose_mixin(acc, outcome.name, run)
    elif isinstance(outcome, SplitVariants):
        _apply_split(outcome, scope, acc)
        acc.add_imports(outcome.imports)
    elif isinstance(outcome, EmitStyleFunction):
        for prop, value in outcome.fallback:
            acc.style.set(prop, value, scope)
        key = acc.style_key + suffix_from_condition(outcome.source_prop)
        draft = acc.function(key, outcome.source_prop, outcome.param, outcome.condition)
        for prop, value in outcome.values:
            draft.body.set(prop, value, scope)
        acc.drop_props([outcome.source_prop])
        acc.add_imports(outcome.imports)
    elif isinstance(outcome, EmitInlineStyleValue):
        if not scope.is_base:
            raise BailSignal(
                BailCategory.CONTEXT_LOSS,
                "Inline style values cannot be applied under nested selectors/at-rules",
            )
        acc.inline_styles.append(InlineStyleProp(dctx.output_property(), outcome.expr))
        acc.needs_wrapper = True
        acc.drop_props(outcome.props)


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------


def _lower_declaration(
    declaration: Declaration,
    rule: Rule,
    target: _Target,
    decl: StyledDeclaration,
    acc: Accumulator,
    run: LoweringContext,
    recognizers: list[Recognizer] | None,
) -> None:
    if declaration.is_static:
        assert declaration.property is not None
        text = declaration.value.text
        resolved = variable_entries(declaration.property, text, declaration.important, run)
        if resolved is None:
            entries = expand_declaration(declaration.property, text, declaration.important)
        else:
            entries, imports = resolved
            acc.add_imports(imports)
        for prop, value in entries:
            target.set(prop, value)
        return
    dctx = DeclarationContext(decl, declaration, target.scope, rule.selector, run, acc)
    try:
        _apply(run_chain(dctx, recognizers), dctx, target, acc, run)
    except BailSignal as signal:
        signal.context.setdefault("selector", rule.selector)
        signal.context.setdefault("property", declaration.property)
        if dctx.expr is not None:
            signal.context.setdefault("expression", dctx.expr.kind)
        raise


def _commit(decl: StyledDeclaration, acc: Accumulator, out: Synthesis, run: LoweringContext) -> None:
    for key, value in out.pending.items():
        run.results.set(key, value)
    run.lowered[decl.name] = out.record
    run.base_values[decl.name] = out.base_values
    run.patched_mixin_keys.update(out.replaced_mixin_keys)
    run.ancestor_markers.update(acc.marked_parents)
    for key, draft in acc.overrides.items():
        existing = run.overrides.get(key)
        if existing is None:
            run.overrides[key] = draft
        else:
            existing.merge(draft)


def lower_component(
    decl: StyledDeclaration,
    run: LoweringContext,
    recognizers: list[Recognizer] | None = None,
) -> LoweredComponent | None:
    """Lower one declaration; returns its record, or None when it bailed.

    All writes are held until synthesis succeeds, so a bail leaves the run
    exactly as it was apart from the bail diagnostic.
    """
    controller = BailController(decl, run)
    if decl.parse_error is not None:
        controller.bail(
            BailCategory.UNRESOLVABLE_INTERPOLATION,
            f"Template parse error: {decl.parse_error}",
            severity=Severity.ERROR,
        )
        return None
    acc = Accumulator(to_style_key(decl.name))
    try:
        for rule in decl.rules:
            try:
                target = _target_for(rule, decl, acc, run)
            except BailSignal as signal:
                signal.context.setdefault("selector", rule.selector)
                raise
            for declaration in rule.declarations:
                _lower_declaration(declaration, rule, target, decl, acc, run, recognizers)
        out = synthesize(decl, acc, run)
    except BailSignal as signal:
        controller.bail(signal.category, signal.reason, **signal.context)
        return None
    _commit(decl, acc, out, run)
    logger.debug("%s: lowered into %s", decl.name, ", ".join(out.pending))
    return out.record


def lower_keyframes(animation: KeyframesDeclaration, run: LoweringContext) -> Keyframes | None:
    """Lower one ``keyframes`` declaration into a result entry under its own name."""
    if animation.parse_error is not None:
        BailController(animation, run).bail(
            BailCategory.UNRESOLVABLE_INTERPOLATION,
            f"Keyframes parse error: {animation.parse_error}",
            severity=Severity.ERROR,
        )
        return None
    frames: dict[str, dict[str, Any]] = {}
    for selector, declarations in animation.frames:
        frame = frames.setdefault(selector, {})
        for declaration in declarations:
            assert declaration.property is not None
            for prop, value in expand_declaration(
                declaration.property, declaration.value.text, declaration.important
            ):
                frame[prop] = value
    keyframes = Keyframes(frames)
    run.results.set(animation.name, keyframes)
    logger.debug("%s: lowered keyframes (%d frame(s))", animation.name, len(frames))
    return keyframes


def prune_mixin_keys(run: LoweringContext) -> None:
    """Empty patched-away mixin keys that no lowered component applies."""
    for key in sorted(run.patched_mixin_keys):
        referenced = any(
            key in record.style_keys
            for record in run.lowered.values()
            if not (record.is_css_helper and record.style_key == key)
        )
        if not referenced and key in run.results:
            run.results.replace(key, {})


def lower(
    declarations: Iterable[StyledDeclaration],
    adapter: ValueAdapter | None = None,
    config: LoweringConfig | None = None,
    *,
    imports: dict | None = None,
    constants: dict | None = None,
    file_path: str | None = None,
    recognizers: list[Recognizer] | None = None,
    keyframes: Iterable[KeyframesDeclaration] = (),
) -> LoweringResult:
    """Lower *declarations* in source order with one shared run context.

    *keyframes* are lowered first, so every component can reference them.
    """
    config = config or LoweringConfig()
    run = LoweringContext(
        adapter or MappingAdapter(config),
        config,
        imports=imports,
        constants=constants,
        file_path=file_path,
    )
    declarations = list(declarations)
    run.register(declarations)
    for animation in keyframes:
        run.keyframes[animation.name] = animation
        lower_keyframes(animation, run)
    for decl in declarations:
        lower_component(decl, run, recognizers)
    finalize_overrides(run)
    prune_mixin_keys(run)
    logger.info(
        "Lowered %d of %d component(s) from %s (%d bailed)",
        len(run.lowered),
        len(declarations),
        file_path or "<input>",
        len(run.bailed),
    )
    return LoweringResult(run.results, run.lowered, run.diagnostics, set(run.bailed))


def lower_source(
    text: str,
    path: str | None = None,
    config: LoweringConfig | None = None,
    adapter: ValueAdapter | None = None,
) -> LoweringResult:
    """Scan a source file and lower every styled declaration in it."""
    source = scan_source(text, path, config)
    return lower(
        source.declarations,
        adapter,
        config,
        imports=source.imports,
        constants=source.constants,
        file_path=path,
        keyframes=source.keyframes,
    )
