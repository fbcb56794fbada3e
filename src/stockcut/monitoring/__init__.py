"""Monitoring module for stockcut.

Provides metrics tracking and Telegram notifications for optimization runs.
"""

from .metrics import (
    ExperimentMetrics,
    RunMetrics,
    export_history_to_csv,
    export_solution_to_json,
    export_to_csv,
    export_to_json,
    format_solution,
    print_summary,
)
from .telegram_notifier import (
    format_error,
    format_experiment_start,
    format_final_summary,
    format_progress,
    format_run_complete,
    send_telegram,
)

__all__ = [
    # Metrics
    "ExperimentMetrics",
    "RunMetrics",
    "export_history_to_csv",
    "export_solution_to_json",
    "export_to_csv",
    "export_to_json",
    "format_solution",
    "print_summary",
    # Telegram
    "send_telegram",
    "format_experiment_start",
    "format_run_complete",
    "format_progress",
    "format_error",
    "format_final_summary",
]
