"""Lightweight Telegram notification for optimization experiment progress.

Sends plain-text messages to a Telegram channel via the Bot API for:
- Experiment start notifications
- Per-problem results and progress milestones
- Errors (e.g. infeasible problems)
- Final results summary

No retry logic: progress updates are non-critical, failures are logged
and reported as ``False``.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx

logger = logging.getLogger(__name__)

TELEGRAM_API = "https://api.telegram.org/bot{token}/sendMessage"


async def send_telegram(
    message: str,
    chat_id: str | None = None,
    token: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bool:
    """Send a plain-text message to a Telegram channel.

    Args:
        message: Text to send.
        chat_id: Telegram chat ID. Defaults to TELEGRAM_CHAT_ID env var.
        token: Bot token. Defaults to TELEGRAM_BOT_TOKEN env var.
        transport: Optional httpx transport (used by tests).

    Returns:
        True if Telegram accepted the message, False otherwise.
    """
    token = token or os.environ.get("TELEGRAM_BOT_TOKEN", "")
    if not token:
        return False

    chat_id = chat_id or os.environ.get("TELEGRAM_CHAT_ID", "")
    if not chat_id:
        return False

    url = TELEGRAM_API.format(token=token)
    payload = {"chat_id": chat_id, "text": message}

    try:
        async with httpx.AsyncClient(timeout=10.0, transport=transport) as client:
            resp = await client.post(url, json=payload)
            data = resp.json()
            return bool(data.get("ok", False))
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("Telegram notification failed: %s", exc)
        return False


def format_experiment_start(total_problems: int, population_size: int, epochs: int) -> str:
    """Format experiment start notification message.

    Example:
        >>> print(format_experiment_start(3, 100, 1000))
        Experiment Started
        Problems: 3
        Population: 100, epochs: 1000
    """
    return (
        f"Experiment Started\n"
        f"Problems: {total_problems}\n"
        f"Population: {population_size}, epochs: {epochs}"
    )


def format_run_complete(
    run_id: str,
    stock_pieces: int,
    utilization_pct: float,
    fitness: float,
) -> str:
    """Format a single problem's result.

    Example:
        >>> print(format_run_complete("two_stock", 9, 93.4, 0.8712))
        Problem Solved: two_stock
        Stock pieces: 9
        Utilization: 93.4%
        Fitness: 0.8712
    """
    return (
        f"Problem Solved: {run_id}\n"
        f"Stock pieces: {stock_pieces}\n"
        f"Utilization: {utilization_pct:.1f}%\n"
        f"Fitness: {fitness:.4f}"
    )


def format_progress(runs_completed: int, total_problems: int, avg_utilization: float) -> str:
    """Format progress milestone notification.

    Example:
        >>> print(format_progress(3, 10, 88.5))
        Progress Update
        Completed: 3/10 problems (30%)
        Avg Utilization: 88.5%
    """
    progress_pct = (runs_completed / total_problems) * 100 if total_problems else 100.0
    return (
        f"Progress Update\n"
        f"Completed: {runs_completed}/{total_problems} problems ({progress_pct:.0f}%)\n"
        f"Avg Utilization: {avg_utilization:.1f}%"
    )


def format_error(error_type: str, error_message: str, context: dict[str, Any] | None = None) -> str:
    """Format error notification message.

    Example:
        >>> print(format_error("InfeasibleInputError", "Piece too long", {"run_id": "a"}))
        Error: InfeasibleInputError
        Piece too long
        Context: run_id=a
    """
    lines = [
        f"Error: {error_type}",
        error_message,
    ]
    if context:
        ctx_str = ", ".join(f"{k}={v}" for k, v in context.items())
        lines.append(f"Context: {ctx_str}")
    return "\n".join(lines)


def format_final_summary(
    total_runs: int,
    total_stock_pieces: int,
    avg_utilization: float,
    runtime_seconds: float,
    errors: int,
) -> str:
    """Format final experiment results summary.

    Example:
        >>> print(format_final_summary(2, 14, 91.2, 90, 0))
        Experiment Complete
        Problems: 2
        Stock pieces: 14
        Avg Utilization: 91.2%
        Runtime: 1.5 minutes
        Errors: 0
    """
    runtime_minutes = runtime_seconds / 60
    return (
        f"Experiment Complete\n"
        f"Problems: {total_runs}\n"
        f"Stock pieces: {total_stock_pieces}\n"
        f"Avg Utilization: {avg_utilization:.1f}%\n"
        f"Runtime: {runtime_minutes:.1f} minutes\n"
        f"Errors: {errors}"
    )
