from __future__ import annotations

import pytest
from loguru import logger

from engine.pipeline_logger import PipelineLogger


@pytest.fixture
def records():
    captured = []
    PipelineLogger("Probe")  # installs the base sinks first
    sink_id = logger.add(lambda msg: captured.append(msg.record), level="DEBUG")
    yield captured
    logger.remove(sink_id)


def test_context_is_attached_to_records(records) -> None:
    log = PipelineLogger("Pipeline").with_context(project="p1", mode="export")
    log.decision("Preview cache hit", "identical inputs")

    record = records[-1]
    assert record["extra"]["component"] == "Pipeline"
    assert record["extra"]["scope"] == "[project=p1 mode=export] "
    assert record["message"] == "DECISION: Preview cache hit | Reason: identical inputs"


def test_failed_step_is_logged_and_reraised(records) -> None:
    log = PipelineLogger("Pipeline")
    with pytest.raises(ValueError):
        with log.step_start("Compile body") as step:
            raise ValueError("bad markup")

    assert step.elapsed_ms >= 0
    assert records[-1]["level"].name == "ERROR"
    assert records[-1]["message"].startswith("STEP FAILED: Compile body")
    assert records[-1]["message"].endswith("| bad markup")


def test_braces_in_messages_are_not_formatted(records) -> None:
    PipelineLogger("TemplateCompiler").warning("Unresolved token {{mystery}} removed")
    assert records[-1]["message"] == "Unresolved token {{mystery}} removed"
