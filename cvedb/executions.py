"""Workflow runs and their sub-jobs: fetching, starting, stopping and labelling."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from typing import Iterable, Iterator
from urllib.parse import parse_qs, urlparse

from cvedb.models import (
    NIL_UUID,
    Fleet,
    Run,
    RunSubJobInsights,
    SignedURL,
    SubJob,
    SubJobOutput,
    WorkflowVersion,
)
from cvedb.transport import ApiError, BaseClient, Service


@contextmanager
def _failing(prefix: str) -> Iterator[None]:
    try:
        yield
    except ApiError as exc:
        raise ApiError(f"{prefix}: {exc}", exc.status_code) from exc
    except LookupError as exc:
        raise type(exc)(f"{prefix}: {exc}") from exc


def _is_nil(value: uuid.UUID | None) -> bool:
    return value is None or value == NIL_UUID


def label_sub_jobs(sub_jobs: list[SubJob], version: WorkflowVersion) -> list[SubJob]:
    """Give every sub-job a unique label taken from its node, in place, and return the list.

    Where two nodes share a label, the node names are used instead; where a name is
    taken too, a numeric suffix is added.
    """
    labels: set[str] = set()
    for position, sub_job in enumerate(sub_jobs):
        sub_job.label = version.data.nodes[sub_job.name].label.replace("/", "-")
        if sub_job.label not in labels:
            labels.add(sub_job.label)
            continue

        existing = sub_job.label
        sub_job.label = sub_job.name
        if sub_job.label in labels:
            label = f"{sub_job.name}-1"
            counter = 1
            while label in labels:
                label = label.removesuffix(f"-{counter}") + f"-{counter + 1}"
                counter += 1
            sub_job.label = label
            labels.add(label)
        else:
            for earlier in sub_jobs[:position]:
                if earlier.label == existing:
                    earlier.label = earlier.name
                    for child in earlier.children or []:
                        child.label = f"{child.task_index}-{earlier.name}"
            labels.add(sub_job.label)
    return sub_jobs


def filter_sub_jobs(sub_jobs: Iterable[SubJob], identifiers: list[str]) -> list[SubJob]:
    """Keep the sub-jobs whose label or node name is among the identifiers.

    Every identifier must match at least one sub-job.
    """
    sub_jobs = list(sub_jobs)
    if not identifiers:
        return sub_jobs

    wanted = set(identifiers)
    found: set[str] = set()
    matching: list[SubJob] = []
    for sub_job in sub_jobs:
        by_label = sub_job.label in wanted
        by_name = sub_job.name in wanted
        if by_label:
            found.add(sub_job.label)
        if by_name:
            found.add(sub_job.name)
        if by_label or by_name:
            matching.append(sub_job)

    for identifier in identifiers:
        if identifier not in found:
            raise LookupError(f"subjob with name or label {identifier} not found")
    return matching


class ExecutionsApi(BaseClient):
    """Operations on workflow runs and their sub-jobs."""

    def get_run(self, run_id: uuid.UUID) -> Run:
        """Return a run by ID."""
        with _failing("failed to get run"):
            data = self.request("GET", f"/execution/{run_id}/")
        return Run.from_dict(data or {})

    def get_run_by_url(self, url: str) -> Run | None:
        """Return the run named by the "run" query parameter of a URL, or None if it has none."""
        query = parse_qs(urlparse(url).query, keep_blank_values=True)
        run_ids = query.get("run")
        if run_ids is None:
            return None
        if len(run_ids) != 1:
            raise ValueError(f"invalid number of run parameters in URL: {len(run_ids)}")
        try:
            run_id = uuid.UUID(run_ids[0])
        except ValueError as exc:
            raise ValueError(f"invalid run ID format: {exc}") from exc
        return self.get_run(run_id)

    def get_runs(
        self,
        workflow_id: uuid.UUID | None = None,
        status: str = "",
        limit: int = 0,
    ) -> list[Run]:
        """Return the vault's runs, optionally for one workflow and one status."""
        path = f"/execution/?type=Editor&vault={self.vault_id}"
        if not _is_nil(workflow_id):
            path += f"&workflow={workflow_id}"
        if status:
            path += f"&status={status}"
        with _failing("failed to get runs"):
            items = self.paginate(path, limit)
        return [Run.from_dict(item) for item in items]

    def get_latest_run(self, workflow_id: uuid.UUID) -> Run:
        """Return the most recent run of a workflow."""
        with _failing("failed to get runs"):
            runs = self.get_runs(workflow_id, "", 1)
        if not runs:
            raise LookupError("no runs found for workflow")
        return runs[0]

    def get_run_ip_addresses(self, run_id: uuid.UUID) -> list[str]:
        """Return the IP addresses a run used."""
        with _failing("failed to get run IP addresses"):
            data = self.request("GET", f"/execution/{run_id}/ips/")
        return list(data or [])

    def stop_run(self, run_id: uuid.UUID) -> None:
        """Stop a run."""
        with _failing("failed to stop run"):
            self.request("POST", f"/execution/{run_id}/stop/")

    def create_run(
        self,
        version_id: uuid.UUID,
        machines: int,
        fleet: Fleet,
        use_static_ips: bool = False,
    ) -> Run:
        """Start a run of a workflow version on a fleet."""
        if _is_nil(version_id):
            raise ValueError("version ID cannot be nil")
        if _is_nil(fleet.id):
            raise ValueError("invalid fleet")
        if not fleet.machines:
            raise ValueError("fleet has no machines")

        machine_kind = "self_hosted" if fleet.machines[0].name == "self_hosted" else "default"
        body = {
            "machines": {machine_kind: machines},
            "workflow_version_info": str(version_id),
            "fleet": str(fleet.id),
            "vault": str(fleet.vault),
            "use_static_ips": use_static_ips,
        }
        with _failing("failed to create run"):
            data = self.request("POST", "/execution/", body)
        return Run.from_dict(data or {})

    def get_run_sub_job_insights(self, run_id: uuid.UUID) -> RunSubJobInsights:
        """Return the counts of a run's sub-jobs by status."""
        with _failing("failed to get run insights"):
            data = self.request("GET", f"/subjob/insight?execution={run_id}")
        return RunSubJobInsights.from_dict(data or {})

    def get_sub_jobs(self, run_id: uuid.UUID) -> list[SubJob]:
        """Return every sub-job of a run."""
        with _failing("failed to get sub-jobs"):
            items = self.paginate(f"/subjob/?execution={run_id}")
        return [SubJob.from_dict(item) for item in items]

    def stop_sub_job(self, sub_job_id: uuid.UUID) -> None:
        """Stop a sub-job."""
        with _failing("failed to stop sub-job"):
            self.request("POST", f"/subjob/{sub_job_id}/stop/")

    def get_child_sub_jobs(self, parent_id: uuid.UUID) -> list[SubJob]:
        """Return the tasks of a task group."""
        with _failing("failed to get child sub-jobs"):
            items = self.paginate(f"/subjob/children/?parent={parent_id}")
        return [SubJob.from_dict(item) for item in items]

    def get_child_sub_job(self, parent_id: uuid.UUID, task_index: int) -> SubJob:
        """Return the task of a task group with the given index."""
        with _failing("failed to get child sub-job"):
            items = self.paginate(
                f"/subjob/children/?parent={parent_id}&task_index={task_index}", 1
            )
        if not items:
            raise LookupError(f"no child sub-job found for task index {task_index}")
        return SubJob.from_dict(items[0])

    def get_sub_job_outputs(self, sub_job_id: uuid.UUID) -> list[SubJobOutput]:
        """Return the outputs of a sub-job."""
        with _failing("failed to get sub-job outputs"):
            items = self.paginate(f"/subjob-output/?subjob={sub_job_id}")
        return [SubJobOutput.from_dict(item) for item in items]

    def get_module_sub_job_outputs(
        self, module_name: str, run_id: uuid.UUID
    ) -> list[SubJobOutput]:
        """Return the outputs of a module's sub-jobs in a run."""
        path = f"/subjob-output/module-outputs/?module_name={module_name}&execution={run_id}"
        with _failing("failed to get module sub-job outputs"):
            items = self.paginate(path)
        return [SubJobOutput.from_dict(item) for item in items]

    def get_output_signed_url(self, output_id: uuid.UUID) -> SignedURL:
        """Return a signed download URL for an output."""
        with _failing("failed to get output signed URL"):
            data = self.request(
                "GET", f"/job/{output_id}/signed_url/", service=Service.ORCHESTRATOR
            )
        return SignedURL.from_dict(data or {})