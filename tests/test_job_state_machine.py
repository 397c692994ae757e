"""Tests for job state machine — caller-driven transitions and bid-derived status."""

import pytest

from jobmarket.market.status import JobStateMachine, derive_status
from jobmarket.models.job import Job, JobStatus


def _make_job(status: JobStatus = JobStatus.OPEN) -> Job:
    return Job(
        job_id=1,
        client="client-1",
        title="Test Job",
        description="Test",
        budget=1000,
        deadline=200,
        bid_deadline=150,
        created_at=100,
        status=status,
    )


class TestValidTransitions:
    @pytest.mark.parametrize("source", [JobStatus.OPEN, JobStatus.BIDDING])
    def test_to_assigned(self, source: JobStatus) -> None:
        job = _make_job(source)
        assert JobStateMachine.validate_transition(job, JobStatus.ASSIGNED) == []

    @pytest.mark.parametrize("source", [JobStatus.OPEN, JobStatus.BIDDING])
    def test_to_cancelled(self, source: JobStatus) -> None:
        job = _make_job(source)
        assert JobStateMachine.validate_transition(job, JobStatus.CANCELLED) == []

    def test_assigned_to_in_progress(self) -> None:
        job = _make_job(JobStatus.ASSIGNED)
        assert JobStateMachine.validate_transition(job, JobStatus.IN_PROGRESS) == []

    def test_in_progress_to_completed(self) -> None:
        job = _make_job(JobStatus.IN_PROGRESS)
        assert JobStateMachine.validate_transition(job, JobStatus.COMPLETED) == []

    def test_in_progress_to_disputed(self) -> None:
        job = _make_job(JobStatus.IN_PROGRESS)
        assert JobStateMachine.validate_transition(job, JobStatus.DISPUTED) == []


class TestInvalidTransitions:
    def test_open_to_bidding_is_not_caller_driven(self) -> None:
        job = _make_job(JobStatus.OPEN)
        errors = JobStateMachine.validate_transition(job, JobStatus.BIDDING)
        assert len(errors) == 1
        assert "Invalid job transition" in errors[0]

    def test_assigned_cannot_be_cancelled(self) -> None:
        job = _make_job(JobStatus.ASSIGNED)
        assert JobStateMachine.validate_transition(job, JobStatus.CANCELLED)

    def test_open_cannot_skip_to_in_progress(self) -> None:
        job = _make_job(JobStatus.OPEN)
        assert JobStateMachine.validate_transition(job, JobStatus.IN_PROGRESS)

    def test_assigned_cannot_complete(self) -> None:
        job = _make_job(JobStatus.ASSIGNED)
        assert JobStateMachine.validate_transition(job, JobStatus.COMPLETED)

    @pytest.mark.parametrize(
        "terminal", [JobStatus.COMPLETED, JobStatus.CANCELLED, JobStatus.DISPUTED],
    )
    def test_terminal_has_no_exits(self, terminal: JobStatus) -> None:
        job = _make_job(terminal)
        for target in JobStatus:
            assert JobStateMachine.validate_transition(job, target)

    def test_error_lists_allowed_targets(self) -> None:
        job = _make_job(JobStatus.IN_PROGRESS)
        errors = JobStateMachine.validate_transition(job, JobStatus.OPEN)
        assert "completed" in errors[0]
        assert "disputed" in errors[0]


class TestApplyTransition:
    def test_apply_valid(self) -> None:
        job = _make_job(JobStatus.ASSIGNED)
        assert JobStateMachine.apply_transition(job, JobStatus.IN_PROGRESS) == []
        assert job.status == JobStatus.IN_PROGRESS

    def test_apply_invalid_leaves_status(self) -> None:
        job = _make_job(JobStatus.COMPLETED)
        errors = JobStateMachine.apply_transition(job, JobStatus.OPEN)
        assert errors
        assert job.status == JobStatus.COMPLETED


class TestTerminalAndQueries:
    def test_terminal_statuses(self) -> None:
        assert JobStateMachine.is_terminal(JobStatus.COMPLETED)
        assert JobStateMachine.is_terminal(JobStatus.CANCELLED)
        assert JobStateMachine.is_terminal(JobStatus.DISPUTED)

    def test_non_terminal_statuses(self) -> None:
        for status in (JobStatus.OPEN, JobStatus.BIDDING, JobStatus.ASSIGNED,
                       JobStatus.IN_PROGRESS):
            assert not JobStateMachine.is_terminal(status)

    def test_valid_transitions_from_open(self) -> None:
        assert JobStateMachine.valid_transitions(JobStatus.OPEN) == {
            JobStatus.ASSIGNED, JobStatus.CANCELLED,
        }

    def test_valid_transitions_is_a_copy(self) -> None:
        targets = JobStateMachine.valid_transitions(JobStatus.ASSIGNED)
        targets.add(JobStatus.COMPLETED)
        assert JobStateMachine.valid_transitions(JobStatus.ASSIGNED) == {
            JobStatus.IN_PROGRESS,
        }


class TestDeriveStatus:
    def test_open_with_bids_becomes_bidding(self) -> None:
        assert derive_status(JobStatus.OPEN, 1) == JobStatus.BIDDING

    def test_open_without_bids_stays_open(self) -> None:
        assert derive_status(JobStatus.OPEN, 0) == JobStatus.OPEN

    def test_bidding_without_bids_reopens(self) -> None:
        assert derive_status(JobStatus.BIDDING, 0) == JobStatus.OPEN

    def test_bidding_with_bids_stays_bidding(self) -> None:
        assert derive_status(JobStatus.BIDDING, 2) == JobStatus.BIDDING

    @pytest.mark.parametrize(
        "status",
        [JobStatus.ASSIGNED, JobStatus.IN_PROGRESS, JobStatus.COMPLETED,
         JobStatus.CANCELLED, JobStatus.DISPUTED],
    )
    @pytest.mark.parametrize("count", [0, 1])
    def test_other_statuses_ignore_count(self, status: JobStatus, count: int) -> None:
        assert derive_status(status, count) == status
