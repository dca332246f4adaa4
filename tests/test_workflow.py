"""Unit tests for the job state machine and the retry combinator."""
from unittest.mock import MagicMock
import pytest
from docmigrator.core.errors import ConversionQualityError, FetchError, SlugResolutionError
from docmigrator.core.retry import Outcome, attempt, is_retryable
from docmigrator.core.workflow import (
    PIPELINE,
    JobStage,
    MigrationJob,
    has_pr_reference,
    linked_title,
)


def test_job_advances_through_pipeline():
    """Stages only move forward and end at DONE."""
    job = MigrationJob(issue_number=1, title="t")
    for stage in PIPELINE:
        job.advance(stage)
        assert job.stage is stage
    job.advance(JobStage.DONE)
    assert job.is_terminal


def test_job_rejects_backwards_and_terminal_moves():
    job = MigrationJob(issue_number=1, title="t")
    job.advance(JobStage.CONVERTING)
    with pytest.raises(ValueError):
        job.advance(JobStage.FETCHING)

    job.fail("boom")
    assert job.stage is JobStage.FAILED
    assert job.error_message == "boom"
    with pytest.raises(ValueError):
        job.advance(JobStage.DONE)
    with pytest.raises(ValueError):
        job.fail("again")


def test_pr_reference_detection():
    """Any [#<digits>] marker anywhere in the title counts."""
    assert has_pr_reference("[#42] https://en.cppreference.com/w/cpp/comments.html")
    assert has_pr_reference("migrate https://x/w/a.html [#7]")
    assert not has_pr_reference("https://en.cppreference.com/w/cpp/comments.html")
    assert not has_pr_reference("[#] nothing")


def test_linked_title_replaces_old_reference():
    assert linked_title("https://x/w/a.html", 12) == "[#12] https://x/w/a.html"
    assert linked_title("[#3] https://x/w/a.html", 12) == "[#12] https://x/w/a.html"


def test_stage_str_is_value():
    assert str(JobStage.CONVERTING) == "CONVERTING"


def test_attempt_succeeds_after_retryable_failures():
    """Retryable errors are retried with a sleep between tries."""
    op = MagicMock(side_effect=[FetchError("503"), FetchError("503"), "page"])
    sleep = MagicMock()
    outcome = attempt(op, attempts=3, delay=2.0, sleep=sleep)

    assert outcome.ok
    assert outcome.value == "page"
    assert outcome.attempts == 3
    assert op.call_count == 3
    assert sleep.call_count == 2
    sleep.assert_called_with(2.0)


def test_attempt_exhaustion_returns_last_error():
    """After the last attempt the final error is handed back, not raised."""
    errors = [ConversionQualityError(f"bad {i}", raw_tag_count=9) for i in range(3)]
    op = MagicMock(side_effect=errors)
    sleep = MagicMock()
    outcome = attempt(op, attempts=3, delay=0.5, sleep=sleep)

    assert not outcome.ok
    assert outcome.error is errors[-1]
    assert outcome.attempts == 3
    assert sleep.call_count == 2
    with pytest.raises(ConversionQualityError):
        outcome.unwrap()


def test_attempt_stops_on_non_retryable_error():
    """Errors that are not worth retrying end the loop at once."""
    op = MagicMock(side_effect=SlugResolutionError("no mapping"))
    sleep = MagicMock()
    outcome = attempt(op, attempts=3, sleep=sleep)

    assert outcome.attempts == 1
    assert isinstance(outcome.error, SlugResolutionError)
    sleep.assert_not_called()


def test_attempt_requires_at_least_one_try():
    with pytest.raises(ValueError):
        attempt(lambda: None, attempts=0)


def test_is_retryable():
    assert is_retryable(FetchError("x"))
    assert not is_retryable(SlugResolutionError("x"))
    assert not is_retryable(KeyError("x"))
    assert Outcome(value=1).unwrap() == 1
