from datetime import datetime, timedelta, timezone

import pytest

from cvedb.models import SubJob
from cvedb.stats import (
    SubJobStatus,
    TaskDuration,
    calculate_task_group_stats,
    has_interesting_stats,
)

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def child(index, status="SUCCEEDED", minutes=None, started=True):
    start = T0 if started else None
    end = T0 + timedelta(minutes=minutes) if minutes is not None else None
    return SubJob(task_index=index, status=status, started_date=start, finished_date=end)


def group(*children):
    return SubJob(task_group=True, children=list(children))


def test_status_counts():
    sj = group(
        child(0, "PENDING", started=False),
        child(1, "RUNNING", started=False),
        child(2, "SUCCEEDED", started=False),
        child(3, "SUCCEEDED", started=False),
        child(4, "FAILED", started=False),
        child(5, "STOPPED", started=False),
        child(6, "WEIRD", started=False),
    )
    stats = calculate_task_group_stats(sj)
    assert stats.count == 7
    assert stats.status == SubJobStatus(
        pending=1, running=1, succeeded=2, failed=1, stopping=0, stopped=1
    )


def test_min_max_median_and_deviation():
    sj = group(child(0, minutes=3), child(1, minutes=1), child(2, minutes=2))
    stats = calculate_task_group_stats(sj)
    assert stats.min_duration == TaskDuration(1, timedelta(minutes=1))
    assert stats.max_duration == TaskDuration(0, timedelta(minutes=3))
    assert stats.median == timedelta(minutes=2)
    assert stats.median_absolute_deviation == timedelta(minutes=1)
    assert stats.outliers == []


def test_outliers_beyond_threshold():
    sj = group(
        child(0, minutes=1),
        child(1, minutes=2),
        child(2, minutes=3),
        child(3, minutes=40),
    )
    stats = calculate_task_group_stats(sj)
    assert stats.median == timedelta(minutes=3)
    assert stats.outliers == [TaskDuration(3, timedelta(minutes=40))]


def test_unfinished_child_measured_until_now():
    now = T0 + timedelta(minutes=10)
    sj = group(child(0, "RUNNING"), child(1, minutes=2))
    stats = calculate_task_group_stats(sj, now=now)
    assert stats.max_duration == TaskDuration(0, timedelta(minutes=10))
    assert stats.min_duration == TaskDuration(1, timedelta(minutes=2))


def test_single_duration_has_no_median():
    stats = calculate_task_group_stats(group(child(4, minutes=5)))
    assert stats.median == timedelta(0)
    assert stats.median_absolute_deviation == timedelta(0)
    assert stats.min_duration.task_index == 4
    assert stats.max_duration.task_index == 4


def test_no_started_children_keeps_sentinels():
    stats = calculate_task_group_stats(group(child(0, "PENDING", started=False)))
    assert stats.min_duration.task_index == -1
    assert stats.max_duration.task_index == -1
    assert stats.outliers == []


@pytest.mark.parametrize(
    "name, expected",
    [
        ("batch-output-1", False),
        ("string-to-file-2", False),
        ("nuclei-1", True),
        ("single", True),
        ("batch-output", True),
    ],
)
def test_has_interesting_stats(name, expected):
    assert has_interesting_stats(name) is expected