"""Text report of a workflow run: details, sub-job counts and the node tree."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, TextIO

from cvedb.display import Tree
from cvedb.models import Machines, Run, SubJob, WorkflowVersion
from cvedb.stats import TaskGroupStats, calculate_task_group_stats, has_interesting_stats

_NODE_PATTERN = re.compile(r"\([-a-z0-9]+-[0-9]+\)")

_UNITS = (
    ("year", "years", 365 * 86400),
    ("week", "weeks", 7 * 86400),
    ("day", "days", 86400),
    ("h", "h", 3600),
    ("m", "m", 60),
    ("s", "s", 1),
)

_STATUS_SYMBOLS = {
    "pending": "\u23f3 ",
    "running": "\U0001f535 ",
    "succeeded": "\u2705 ",
    "error": "\u274c ",
    "failed": "\u274c ",
    "stopped": "\u26d4 ",
    "stopping": "\u26d4 ",
}

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_TABLE_HEADER = ("", "NODE", " STATUS", " DURATION", " OUTPUT")
_TABLE_PADDING = 2


@dataclass
class TreeNode:
    """A workflow node as shown in the run tree."""

    name: str
    label: str
    inputs: dict[str, Any] | None = None
    status: str = ""
    output_status: str = ""
    duration: timedelta = timedelta(0)
    printed: bool = False
    children: list[TreeNode] = field(default_factory=list)
    parents: list[TreeNode] = field(default_factory=list)
    task_group: bool = False
    task_group_stats: TaskGroupStats = field(default_factory=TaskGroupStats)


def _round_to_second(delta: timedelta) -> timedelta:
    micros = delta // timedelta(microseconds=1)
    seconds, remainder = divmod(abs(micros), 1_000_000)
    if remainder >= 500_000:
        seconds += 1
    return timedelta(seconds=-seconds if micros < 0 else seconds)


def format_duration(delta: timedelta) -> str:
    """Format a duration, rounded to the second, by its two largest units, e.g. "5m 3s"."""
    total = int(_round_to_second(delta).total_seconds())
    if total == 0:
        return "0s"
    negative = total < 0
    remaining = abs(total)
    parts: list[str] = []
    for singular, plural, size in _UNITS:
        count, remaining = divmod(remaining, size)
        if count > 1:
            parts.append(f"{count} {plural}")
        elif count == 1:
            parts.append(f"{count} {singular}")
    words = " ".join(parts).split(" ")
    text = " ".join(words[:4])
    if negative:
        text = "-" + text
    for unit in (" s", " m", " h"):
        text = text.replace(unit, unit.strip(), 1)
    return text


def format_machines(machines: Machines | None) -> str:
    """Return the number of machines a run uses, or an empty string if none is set."""
    if machines is None:
        return ""
    if machines.default is not None and machines.default > 0:
        return str(machines.default)
    if machines.self_hosted is not None and machines.self_hosted > 0:
        return str(machines.self_hosted)
    return ""


def _format_key_value(key: str, value: str) -> str:
    return f"{key + ':':<18} {value}\n"


def _format_sub_job_status(status: str, count: int, total: int) -> str:
    if count == 0:
        return ""
    share = count / total * 100 if total else float("inf")
    return _format_key_value(status, f"{count}/{total} ({share:.2f}%)")


def _format_timestamp(moment: datetime, now: datetime) -> str:
    local = moment.astimezone()
    stamp = (
        f"{_WEEKDAYS[local.weekday()]}, {local.day:02d} {_MONTHS[local.month - 1]} "
        f"{local.year} {local:%H:%M:%S} {local.tzname() or ''}"
    ).rstrip()
    return f"{stamp} ({format_duration(now - moment)} ago)"


def _node_name_from_connection_id(connection_id: str) -> str | None:
    parts = connection_id.split("/")
    if len(parts) < 3:
        return None
    return parts[1]


def _share(count: int, total: int) -> float:
    return count / total * 100 if total else float("inf")


def _render_table(rows: list[tuple[str, ...]]) -> str:
    columns = len(rows[0]) - 1
    widths = [
        max(len(row[column]) for row in rows) + _TABLE_PADDING for column in range(columns)
    ]
    lines = []
    for row in rows:
        cells = "".join(cell.ljust(width) for cell, width in zip(row[:-1], widths))
        lines.append(cells + row[-1] + "\n")
    return "".join(lines)


class RunPrinter:
    """Writes a report of a run and the status of its nodes."""

    def __init__(self, include_primitive_nodes: bool = False, out: TextIO | None = None) -> None:
        self.include_primitive_nodes = include_primitive_nodes
        self.out = out if out is not None else sys.stdout

    def print_all(
        self,
        run: Run,
        sub_jobs: list[SubJob],
        version: WorkflowVersion,
        include_task_group_stats: bool = False,
    ) -> None:
        """Write the run details, its sub-job counts and the tree of its nodes."""
        now = datetime.now(timezone.utc)
        parts = [
            _format_key_value("Name", run.workflow_name),
            _format_key_value("Status", run.status),
            _format_key_value("Machines", format_machines(run.machines)),
            _format_key_value("Fleet", run.fleet_name),
            "\n",
        ]

        if run.created_date is not None:
            parts.append(_format_key_value("Created", _format_timestamp(run.created_date, now)))
        if run.status != "PENDING" and run.started_date is not None:
            parts.append(_format_key_value("Started", _format_timestamp(run.started_date, now)))
        if run.finished and run.completed_date is not None:
            parts.append(
                _format_key_value("Finished", _format_timestamp(run.completed_date, now))
            )
        parts.append("\n")

        if run.finished:
            if run.completed_date is not None and run.started_date is not None:
                parts.append(
                    _format_key_value(
                        "Duration", format_duration(run.completed_date - run.started_date)
                    )
                )
        elif run.status == "RUNNING" and run.started_date is not None:
            parts.append(_format_key_value("Duration", format_duration(now - run.started_date)))
        if run.average_duration is not None:
            parts.append(
                _format_key_value("Average Duration", format_duration(run.average_duration))
            )
        parts.append("\n")

        insights = run.run_insights
        if insights is not None:
            parts.append(_format_key_value("Total Jobs", str(insights.total)))
            for title, count in (
                ("Succeeded", insights.succeeded),
                ("Running", insights.running),
                ("Pending", insights.pending),
                ("Failed", insights.failed),
                ("Stopping", insights.stopping),
                ("Stopped", insights.stopped),
            ):
                parts.append(_format_sub_job_status(title, count, insights.total))
            parts.append("\n")

        # Nodes without a sub-job have not run: pending while the run goes on, stopped after.
        default_status = "pending" if run.status == "RUNNING" else "stopped"
        all_nodes, roots = self._create_trees(
            sub_jobs, version, default_status, include_task_group_stats, now
        )
        parts.append(self._print_trees(roots, all_nodes, include_task_group_stats))

        self.out.write("".join(parts))

    def _create_trees(
        self,
        sub_jobs: list[SubJob],
        version: WorkflowVersion,
        default_status: str,
        include_task_group_stats: bool,
        now: datetime,
    ) -> tuple[dict[str, TreeNode], list[TreeNode]]:
        nodes = list(version.data.nodes.values())
        all_nodes: dict[str, TreeNode] = {
            node.name: TreeNode(
                name=node.name,
                label=node.label,
                inputs=node.inputs if node.inputs is not None else {},
                status=default_status,
                output_status="no outputs",
            )
            for node in nodes
        }

        if self.include_primitive_nodes:
            for primitive in version.data.primitive_nodes.values():
                all_nodes[primitive.name] = TreeNode(name=primitive.name, label=primitive.label)

        for node in nodes:
            for connection in version.data.connections:
                destination = _node_name_from_connection_id(connection.destination)
                if destination is None or destination != node.name:
                    continue
                source = _node_name_from_connection_id(connection.source)
                if source is None:
                    continue
                child = all_nodes.get(source)
                if child is not None:
                    parent = all_nodes[node.name]
                    child.parents.append(parent)
                    parent.children.append(child)

        roots = [all_nodes[node.name] for node in nodes if not all_nodes[node.name].parents]

        for sub_job in sub_jobs:
            tree_node = all_nodes.get(sub_job.name)
            if tree_node is None:
                continue
            tree_node.status = sub_job.status.lower()
            tree_node.output_status = sub_job.outputs_status.lower().replace("_", " ")
            if sub_job.finished and sub_job.finished_date is not None and sub_job.started_date:
                tree_node.duration = _round_to_second(
                    sub_job.finished_date - sub_job.started_date
                )
            elif sub_job.started_date is None:
                tree_node.duration = timedelta(0)
            else:
                tree_node.duration = _round_to_second(now - sub_job.started_date)
            if sub_job.task_group and include_task_group_stats:
                tree_node.task_group = True
                tree_node.task_group_stats = calculate_task_group_stats(sub_job, now)

        return all_nodes, roots

    def _print_trees(
        self,
        roots: list[TreeNode],
        all_nodes: dict[str, TreeNode],
        include_task_group_stats: bool,
    ) -> str:
        output = []
        for root in roots:
            rendered = self._add_to_tree(root, None, all_nodes, include_task_group_stats).render()
            for node in all_nodes.values():
                node.printed = False

            rows: list[tuple[str, ...]] = [_TABLE_HEADER]
            for line in rendered.split("\n"):
                if not line:
                    continue
                node = None
                if _NODE_PATTERN.search(line):
                    node = all_nodes.get(line.split("(")[1].strip(")"))
                if node is not None:
                    rows.append(
                        ("", line, node.status, format_duration(node.duration), node.output_status)
                    )
                else:
                    rows.append(("", line, "", "", ""))
            output.append(_render_table(rows))
        return "".join(output)

    def _add_to_tree(
        self,
        node: TreeNode,
        branch: Tree | None,
        all_nodes: dict[str, TreeNode],
        include_task_group_stats: bool,
    ) -> Tree:
        value = f"{_STATUS_SYMBOLS.get(node.status, '')}{node.label} ({node.name})"
        branch = Tree(value) if branch is None else branch.add_branch(value)

        if node.task_group and include_task_group_stats:
            self._add_task_group_info(node, branch)

        if self.include_primitive_nodes and node.inputs is not None:
            self._add_parameters(node, branch, all_nodes)

        for child in node.children:
            if not all_nodes[node.name].printed and all_nodes[child.name].inputs is not None:
                self._add_to_tree(child, branch, all_nodes, include_task_group_stats)

        all_nodes[node.name].printed = True
        return branch

    @staticmethod
    def _add_task_group_info(node: TreeNode, branch: Tree) -> None:
        stats = node.task_group_stats
        info = branch.add_branch("Task Group Info")
        tasks = info.add_branch(f"{stats.count} tasks")
        if stats.status.succeeded != stats.count:
            for title, count in (
                ("succeeded", stats.status.succeeded),
                ("running", stats.status.running),
                ("pending", stats.status.pending),
                ("failed", stats.status.failed),
                ("stopping", stats.status.stopping),
                ("stopped", stats.status.stopped),
            ):
                if count > 0:
                    tasks.add_branch(f"{count} {title} ({_share(count, stats.count):.2f}%)")

        if not has_interesting_stats(node.name):
            return
        durations = info.add_branch("Task Duration Stats")
        if stats.max_duration.duration > timedelta(0) and stats.max_duration.task_index != -1:
            durations.add_node(
                f"Max: {format_duration(stats.max_duration.duration)} "
                f"(task {stats.max_duration.task_index})"
            )
        if stats.min_duration.duration > timedelta(0) and stats.min_duration.task_index != -1:
            durations.add_node(
                f"Min: {format_duration(stats.min_duration.duration)} "
                f"(task {stats.min_duration.task_index})"
            )
        if stats.median > timedelta(0):
            median = durations.add_branch(f"Median: {format_duration(stats.median)}")
            if stats.median_absolute_deviation > timedelta(0):
                median.add_node(
                    "Median Absolute Deviation: "
                    f"{format_duration(stats.median_absolute_deviation)}"
                )
        if stats.outliers:
            outliers = durations.add_branch("Outliers")
            for outlier in stats.outliers:
                if outlier.duration < stats.median:
                    difference, direction = stats.median - outlier.duration, "faster"
                else:
                    difference, direction = outlier.duration - stats.median, "slower"
                outliers.add_node(
                    f"Task {outlier.task_index}: {format_duration(difference)} {direction} "
                    f"than median (duration: {format_duration(outlier.duration)})"
                )

    @staticmethod
    def _add_parameters(node: TreeNode, branch: Tree, all_nodes: dict[str, TreeNode]) -> None:
        parameters = branch.add_branch("parameters")
        for input_name in sorted(node.inputs or {}):
            value = node.inputs[input_name].value
            param = f"{input_name}: "
            if value is None:
                continue
            if isinstance(value, str):
                if value.startswith("in/"):
                    if "/file-splitter-" in value or "/split-to-string-" in value:
                        value = value.removeprefix("/in").removesuffix(":item")
                    else:
                        source = _node_name_from_connection_id(value)
                        if source is None:
                            continue
                        referenced = all_nodes.get(source)
                        if referenced is not None and referenced.inputs is None:
                            value = referenced.label
                        else:
                            value = source
                if param.startswith(("file/", "folder/")):
                    parameters.add_node(value)
                else:
                    parameters.add_node(param + value)
            elif isinstance(value, bool):
                parameters.add_node(param + ("true" if value else "false"))
            elif isinstance(value, int):
                parameters.add_node(param + str(value))