"""Statistics over the tasks of a task group."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from cvedb.models import SubJob

OUTLIER_THRESHOLD = timedelta(minutes=15)

_UNINTERESTING_NODES = frozenset({"batch-output", "string-to-file"})

_STATUS_FIELDS = {
    "PENDING": "pending",
    "RUNNING": "running",
    "SUCCEEDED": "succeeded",
    "FAILED": "failed",
    "STOPPING": "stopping",
    "STOPPED": "stopped",
}


@dataclass
class TaskDuration:
    task_index: int
    duration: timedelta


@dataclass
class SubJobStatus:
    pending: int = 0
    running: int = 0
    succeeded: int = 0
    failed: int = 0
    stopping: int = 0
    stopped: int = 0


@dataclass
class TaskGroupStats:
    count: int = 0
    status: SubJobStatus = field(default_factory=SubJobStatus)
    min_duration: TaskDuration = field(default_factory=lambda: TaskDuration(-1, timedelta.max))
    max_duration: TaskDuration = field(default_factory=lambda: TaskDuration(-1, timedelta.min))
    median: timedelta = timedelta(0)
    median_absolute_deviation: timedelta = timedelta(0)
    outliers: list[TaskDuration] = field(default_factory=list)


def calculate_task_group_stats(sub_job: SubJob, now: datetime | None = None) -> TaskGroupStats:
    """Count the children's statuses and summarise their durations."""
    if now is None:
        now = datetime.now(timezone.utc)
    stats = TaskGroupStats(count=len(sub_job.children))

    durations: list[TaskDuration] = []
    for child in sub_job.children:
        attr = _STATUS_FIELDS.get(child.status)
        if attr is not None:
            setattr(stats.status, attr, getattr(stats.status, attr) + 1)

        if child.started_date is None:
            continue
        end = child.finished_date if child.finished_date is not None else now
        task = TaskDuration(child.task_index, end - child.started_date)
        durations.append(task)

        if task.duration > stats.max_duration.duration:
            stats.max_duration = task
        if task.duration < stats.min_duration.duration:
            stats.min_duration = task

    if len(durations) >= 2:
        durations.sort(key=lambda d: d.duration)
        stats.median = durations[len(durations) // 2].duration
        deviations = sorted(abs(d.duration - stats.median) for d in durations)
        stats.median_absolute_deviation = deviations[len(deviations) // 2]
        stats.outliers = [
            d for d in durations if abs(d.duration - stats.median) > OUTLIER_THRESHOLD
        ]

    return stats


def has_interesting_stats(node_name: str) -> bool:
    """Tell whether a node's task statistics are worth displaying."""
    parts = node_name.split("-")
    if len(parts) < 2:
        return True
    return "-".join(parts[:-1]) not in _UNINTERESTING_NODES