# src/orchestration/__init__.py
from .engine import evaluate, find_swap_candidates, calculate_swap_confidence
from .aggregation import merge_alerts, run_orchestration_check
from .executor import resolve

__all__ = [
    "evaluate",
    "find_swap_candidates",
    "calculate_swap_confidence",
    "merge_alerts",
    "run_orchestration_check",
    "resolve"
]
