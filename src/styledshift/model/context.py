"""Run context: the state shared by every component in one lowering run."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from styledshift.config import LoweringConfig
from styledshift.model.diagnostic import DiagnosticLog
from styledshift.model.expr import Expr
from styledshift.model.result import LoweredComponent, ResultMap
from styledshift.model.rules import ImportBinding, KeyframesDeclaration, StyledDeclaration

if TYPE_CHECKING:
    from styledshift.adapter import ValueAdapter


class LoweringContext:
    """Explicit shared state passed by reference through a lowering run.

    Components are lowered sequentially; later components may read what
    earlier ones wrote (mixin values, lowered records), never the reverse.
    """

    def __init__(
        self,
        adapter: ValueAdapter,
        config: LoweringConfig | None = None,
        *,
        imports: dict[str, ImportBinding] | None = None,
        constants: dict[str, Expr] | None = None,
        file_path: str | None = None,
    ) -> None:
        self.adapter = adapter
        self.config = config or LoweringConfig()
        self.imports: dict[str, ImportBinding] = dict(imports or {})
        self.constants: dict[str, Expr] = dict(constants or {})
        self.file_path = file_path
        self.diagnostics = DiagnosticLog()
        self.results = ResultMap()
        self.declarations: dict[str, StyledDeclaration] = {}
        self.keyframes: dict[str, KeyframesDeclaration] = {}
        self.lowered: dict[str, LoweredComponent] = {}
        self.bailed: set[str] = set()
        # Static base values per lowered component, for mixin default backfill.
        self.base_values: dict[str, dict[str, Any]] = {}
        # Cross-component override drafts by key, finalized at the end of the run.
        self.overrides: dict[str, Any] = {}
        self.ancestor_markers: set[str] = set()
        # Mixin keys superseded by a patched copy, candidates for pruning.
        self.patched_mixin_keys: set[str] = set()

    # --- declaration registry -------------------------------------------------

    def register(self, declarations: list[StyledDeclaration]) -> None:
        """Build the name -> declaration map once per run."""
        for decl in declarations:
            self.declarations[decl.name] = decl

    def is_bailed(self, name: str) -> bool:
        return name in self.bailed

    def import_for(self, local: str) -> ImportBinding | None:
        return self.imports.get(local)

    def __repr__(self) -> str:
        return (
            f"LoweringContext(declarations={len(self.declarations)}, "
            f"results={len(self.results)}, diagnostics={len(self.diagnostics)})"
        )
