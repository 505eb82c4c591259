"""
Analysis Configuration

One engine, configured by data. The named presets reproduce the four
classic analysts.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Dict

PROPAGATIONS = ("baseline", "consistency")
SEARCHES = ("recursive", "worklist")


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for a DiagnosisEngine."""
    propagation: str = "baseline"  # "baseline" | "consistency"
    search: str = "recursive"  # "recursive" | "worklist"
    single_origin: bool = False  # fused enumeration + prediction
    ignore_inconsistency: bool = True  # False: diagnose inconsistent observations first
    combine_multipath: bool = True
    report_accuracy: bool = True

    def __post_init__(self):
        if self.propagation not in PROPAGATIONS:
            raise ValueError(f"Unknown propagation strategy: {self.propagation}")
        if self.search not in SEARCHES:
            raise ValueError(f"Unknown search order: {self.search}")

    @staticmethod
    def preset(name: str) -> AnalysisConfig:
        try:
            return ENGINE_PRESETS[name]
        except KeyError:
            raise ValueError(
                f"Unknown engine preset '{name}', expected one of: "
                f"{', '.join(ENGINE_PRESETS)}"
            ) from None

    def with_options(self, **changes) -> AnalysisConfig:
        return replace(self, **changes)


ENGINE_PRESETS: Dict[str, AnalysisConfig] = {
    "analyst": AnalysisConfig(),
    "con_analyst": AnalysisConfig(propagation="consistency"),
    "stack_analyst": AnalysisConfig(search="worklist"),
    "so_analyst": AnalysisConfig(single_origin=True),
}
