"""
engine/pipeline_logger.py — Structured logging for the render pipeline.
Uses loguru; every record carries the component and, when bound, the
project and render mode it belongs to.
"""

from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

from config import LOG_DIR, get_settings

_STDERR_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level:<8}</level> | "
    "<cyan>{extra[component]:<18}</cyan> | "
    "<dim>{extra[scope]}</dim>{message}"
)
_FILE_FORMAT = "{time:YYYY-MM-DDTHH:mm:ss.SSS} | {level} | {extra[component]} | {extra[scope]}{message}"

_configured = False


def configure_logging(level: Optional[str] = None, log_dir: Optional[Path] = None) -> None:
    """(Re)install the stderr and rotating file sinks.

    Called implicitly by the first PipelineLogger; the CLI calls it again
    when the user asks for a different verbosity.
    """
    global _configured
    logger.remove()
    logger.configure(extra={"component": "-", "scope": ""})
    logger.add(
        sys.stderr,
        format=_STDERR_FORMAT,
        level=(level or get_settings().log_level).upper(),
        colorize=True,
    )
    logger.add(
        str((log_dir or LOG_DIR) / "gift_builder_{time:YYYY-MM-DD}.log"),
        format=_FILE_FORMAT,
        level="DEBUG",
        rotation="10 MB",
        retention="7 days",
        encoding="utf-8",
    )
    _configured = True


def _scope(context: Dict[str, Any]) -> str:
    if not context:
        return ""
    return "[" + " ".join(f"{k}={v}" for k, v in context.items()) + "] "


class PipelineLogger:
    """Logger scoped to one pipeline component, optionally to one build."""

    def __init__(self, component: str, **context: Any) -> None:
        if not _configured:
            configure_logging()
        self.component = component
        self.context: Dict[str, Any] = dict(context)
        self._bound = logger.bind(component=component, scope=_scope(self.context))

    def with_context(self, **context: Any) -> PipelineLogger:
        """Child logger tagging every record with e.g. project=p1 mode=export."""
        return PipelineLogger(self.component, **{**self.context, **context})

    # ── Public API ──────────────────────────────────────────

    def info(self, message: str) -> None:
        self._bound.info(message)

    def debug(self, message: str) -> None:
        self._bound.debug(message)

    def warning(self, message: str) -> None:
        self._bound.warning(message)

    def error(self, message: str) -> None:
        self._bound.error(message)

    def action(self, action: str, detail: str = "") -> None:
        """Something the component did (resolved media, compiled a body)."""
        self.info(f"ACTION: {action} | {detail}" if detail else f"ACTION: {action}")

    def decision(self, decision: str, reason: str = "") -> None:
        """A branch taken: screen source, cache hit, discarded result."""
        self.info(f"DECISION: {decision} | Reason: {reason}" if reason else f"DECISION: {decision}")

    def step_start(self, step_name: str) -> _StepTimer:
        return _StepTimer(self, step_name)


class _StepTimer:
    """Times one render step; failures are logged and re-raised."""

    def __init__(self, log: PipelineLogger, step_name: str) -> None:
        self._log = log
        self._step = step_name
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> _StepTimer:
        self._start = time.perf_counter()
        self._log.debug(f"STEP START: {self._step}")
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000
        if exc_type is None:
            self._log.debug(f"STEP DONE: {self._step} ({self.elapsed_ms:.0f}ms)")
        elif issubclass(exc_type, Exception):
            self._log.error(f"STEP FAILED: {self._step} ({self.elapsed_ms:.0f}ms) | {exc_val}")
