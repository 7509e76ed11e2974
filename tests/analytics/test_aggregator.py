from datetime import UTC, date, datetime, timedelta

import pytest
from hypothesis import given
from hypothesis import strategies as st

from job_tracker.analytics import average_response_time, build_summary, summarize_jobs, summarize_tasks
from job_tracker.priority import TaskPriority
from job_tracker.schema import JobApplication, JobStatus, Task

TODAY = date(2024, 6, 1)


def _job(status: JobStatus, **overrides) -> JobApplication:
    fields = {"id": "j", "user_id": "u", "company": "Acme", "date_applied": date(2024, 1, 5), "status": status}
    fields.update(overrides)
    return JobApplication(**fields)


# ── job counts and rates ───────────────────────────────────────────────────────

def test_empty_collection_has_zero_rates():
    summary = summarize_jobs([])
    assert summary.total_applications == 0
    assert summary.response_rate == 0
    assert summary.interview_rate == 0
    assert summary.offer_rate == 0


@given(st.lists(st.sampled_from(list(JobStatus)), max_size=30))
def test_every_status_is_always_present(statuses):
    summary = summarize_jobs([_job(s) for s in statuses])
    assert set(summary.by_status) == set(JobStatus)
    assert sum(summary.by_status.values()) == len(statuses)
    assert 0 <= summary.response_rate <= 100


def test_rates():
    jobs = [_job(JobStatus.interview), _job(JobStatus.offer), _job(JobStatus.rejected), _job(JobStatus.applied)]
    summary = summarize_jobs(jobs)
    assert summary.response_rate == pytest.approx(75.0)
    assert summary.interview_rate == pytest.approx(25.0)
    assert summary.offer_rate == pytest.approx(25.0)


def test_company_and_month_buckets():
    jobs = [
        _job(JobStatus.applied, company="Acme", date_applied=date(2024, 1, 5)),
        _job(JobStatus.applied, company="Acme", date_applied=date(2024, 1, 31)),
        _job(JobStatus.applied, company="acme", date_applied=date(2023, 12, 1)),
    ]
    summary = summarize_jobs(jobs)
    assert summary.by_company == {"Acme": 2, "acme": 1}
    assert summary.by_month == {"Jan 2024": 2, "Dec 2023": 1}
    assert summary.applications_by_month == summary.by_month


def test_missing_fields_skip_only_their_bucket():
    jobs = [
        _job(JobStatus.offer, company="", date_applied=None),
        _job(JobStatus.applied),
    ]
    summary = summarize_jobs(jobs)
    assert summary.total_applications == 2
    assert summary.by_status[JobStatus.offer] == 1
    assert summary.by_company == {"Acme": 1}
    assert summary.by_month == {"Jan 2024": 1}


def test_wire_shape_uses_camel_case():
    wire = summarize_jobs([_job(JobStatus.applied)]).to_wire()
    assert wire["totalApplications"] == 1
    assert wire["byStatus"]["No Response"] == 0
    assert "applicationsByMonth" in wire
    assert "averageResponseTime" not in wire
    assert "totalTasks" not in wire


# ── task metrics ───────────────────────────────────────────────────────────────

def test_upcoming_window(make_task):
    tasks = [
        make_task(due_date=TODAY + timedelta(days=7)),
        make_task(due_date=TODAY + timedelta(days=8)),
        make_task(due_date=TODAY + timedelta(days=1), completed=True),
        make_task(due_date=TODAY - timedelta(days=1)),
        make_task(due_date=TODAY),
    ]
    assert summarize_tasks(tasks, TODAY).upcoming_tasks_due == 2


def test_task_distributions(make_task):
    tasks = [
        make_task(priority="High", completed=True),
        make_task(priority="low"),
        make_task(priority="low"),
        make_task(priority="whatever"),
    ]
    metrics = summarize_tasks(tasks, TODAY)
    assert metrics.total_tasks == 4
    assert metrics.tasks_by_status == {"Completed": 1, "Pending": 3}
    assert metrics.tasks_by_priority == {
        TaskPriority.low: 2,
        TaskPriority.medium: 1,
        TaskPriority.high: 1,
    }


def test_unknown_raw_priority_is_not_counted():
    raw = Task.model_construct(
        id="t", user_id="u", title="raw", due_date=None, completed=False, priority="urgent"
    )
    metrics = summarize_tasks([raw], TODAY)
    assert metrics.total_tasks == 1
    assert sum(metrics.tasks_by_priority.values()) == 0


def test_build_summary_attaches_task_metrics(make_task):
    summary = build_summary([_job(JobStatus.applied)], [make_task(due_date=TODAY)], today=TODAY)
    wire = summary.to_wire()
    assert wire["totalTasks"] == 1
    assert wire["upcomingTasksDue"] == 1
    assert wire["tasksByPriority"] == {"low": 0, "medium": 1, "high": 0}


def test_build_summary_without_tasks_leaves_task_fields_absent():
    summary = build_summary([_job(JobStatus.applied)], None)
    assert summary.total_tasks is None
    assert summary.upcoming_tasks_due is None


# ── average response time ──────────────────────────────────────────────────────

def test_average_absent_without_responses():
    jobs = [_job(JobStatus.applied), _job(JobStatus.withdrawn), _job(JobStatus.no_response)]
    assert average_response_time(jobs) is None
    assert average_response_time([]) is None


def test_average_rounds_each_job_up_to_whole_days():
    jobs = [
        _job(JobStatus.interview, date_applied=date(2024, 1, 1), updated_at=datetime(2024, 1, 11, tzinfo=UTC)),
        _job(JobStatus.rejected, date_applied=date(2024, 1, 1), updated_at=datetime(2024, 1, 5, 12, tzinfo=UTC)),
        _job(JobStatus.applied, date_applied=date(2024, 1, 1), updated_at=datetime(2024, 3, 1, tzinfo=UTC)),
    ]
    assert average_response_time(jobs) == pytest.approx(7.5)


def test_zero_day_responses_are_ignored():
    same_day = _job(JobStatus.offer, date_applied=date(2024, 1, 1), updated_at=datetime(2024, 1, 1, tzinfo=UTC))
    assert average_response_time([same_day]) is None

    later = _job(JobStatus.offer, date_applied=date(2024, 1, 1), updated_at=datetime(2024, 1, 3, tzinfo=UTC))
    assert average_response_time([same_day, later]) == pytest.approx(2.0)


def test_naive_timestamps_are_treated_as_utc():
    job = _job(JobStatus.offer, date_applied=date(2024, 1, 1), updated_at=datetime(2024, 1, 1, 10))
    assert average_response_time([job]) == pytest.approx(1.0)
