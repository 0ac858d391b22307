# cvedb

A Python client for the Cvedb workflow platform. It talks to the platform's
JSON API and gives you dataclasses for spaces, projects, workflows, workflow
versions, runs, sub-jobs, fleets and library tools, along with helpers to
edit the inputs of a workflow version and to render runs and listings as
text trees.

## Installation

```
pip install cvedb
```

The only runtime dependency is `requests`.

## Connecting

The API is split over three client classes, each built on
`cvedb.transport.BaseClient` and taking the same arguments:
`token`, `base_url`, `vault_id` and `session` (a prepared
`requests.Session`).

- `cvedb.accounts.AccountsApi`: the current user, fleets, the vault's IP
  addresses, spaces and projects.
- `cvedb.executions.ExecutionsApi`: runs and their sub-jobs.
- `cvedb.catalog.CatalogApi`: the shared library and the vault's private
  tools.

Most calls need the vault id. It can be read from the current user:

```python
from cvedb.accounts import AccountsApi
from cvedb.executions import ExecutionsApi

vault_id = AccountsApi("token").get_current_user().profile.vault_info.id
accounts = AccountsApi("token", vault_id=vault_id)
executions = ExecutionsApi("token", vault_id=vault_id)
```

An empty token raises `ValueError`. A failed request, or an error answer
from the API, raises `cvedb.transport.ApiError`, whose `status_code` holds
the HTTP status when there was one. Lookups by name or id that find nothing
raise `LookupError`.

Lists that the API pages through are fetched page by page (500 items a
page) and returned as one list. `BaseClient.request` and
`BaseClient.paginate` can also be called directly for any other endpoint;
`request` accepts a dict or any object with a `to_dict` method as the body.

## Spaces, projects and fleets

```python
space = accounts.get_space_by_name("Research")
project = space.get_project_by_name("Recon")

new_space = accounts.create_space("Scratch", "Temporary work")
accounts.create_project("Notes", "", new_space.id)

fleet = accounts.get_fleet_by_name("Default")
```

## Runs and sub-jobs

```python
runs = executions.get_runs(workflow_id, "COMPLETED", 10)
latest = executions.get_latest_run(workflow_id)
run = executions.get_run_by_url("https://example.com/editor/x?run=<run id>")

new_run = executions.create_run(version_id, 4, fleet, False)
sub_jobs = executions.get_sub_jobs(new_run.id)
executions.stop_run(new_run.id)
```

`get_run_by_url` returns `None` when the URL carries no `run` parameter.
`create_run` raises `ValueError` for a nil version id, a fleet without an
id or a fleet without machines.

`cvedb.executions.label_sub_jobs(sub_jobs, version)` gives each sub-job a
unique label taken from its node in the workflow version, and
`cvedb.executions.filter_sub_jobs(sub_jobs, identifiers)` keeps the
sub-jobs whose label or node name is among the identifiers, raising
`LookupError` for an identifier that matches nothing.

Task group statistics (counts by status, minimum, maximum, median, median
absolute deviation and tasks more than 15 minutes from the median) come
from `cvedb.stats.calculate_task_group_stats`.

## Printing a run

```python
import sys
from cvedb.runprinter import RunPrinter

printer = RunPrinter(False, sys.stdout)
printer.print_all(run, sub_jobs, version, True)
```

This writes the run's details, its sub-job counts and a table of the
workflow's node tree with each node's status, duration and output status.

## Setting workflow inputs

```python
from cvedb.inputs import Inputs, NodeLookupTable, NodeParameterInput, PrimitiveNodeInput
from cvedb.models import WorkflowVersion

version = WorkflowVersion.from_dict(version_json)

inputs = Inputs(
    primitive_node_inputs=[PrimitiveNodeInput("target list", "https://example.com/hosts.txt")],
    node_inputs=[NodeParameterInput("port scanner", {"ports": ["80", "443"]})],
)

lookup = NodeLookupTable.build(version)
lookup.resolve_inputs(inputs)
for item in inputs.primitive_node_inputs + inputs.node_inputs:
    item.apply_to_workflow_version(version)

payload = version.to_dict()
```

Nodes may be referred to by id or by label. Setting a node parameter
replaces any primitive inputs already connected to it. Invalid changes
raise `cvedb.graph.WorkflowBuildError`. The lower-level graph edits
(connections and primitive nodes) are in `cvedb.graph`.

## Library and private tools

```python
from cvedb.catalog import CatalogApi

catalog = CatalogApi("token", vault_id=vault_id)
tools = catalog.search_library_tools("nmap")
tool = catalog.get_library_tool_by_name("nmap")
copy = catalog.copy_workflow_from_library(library_workflow.id, space.id)
```

Private tools are created and updated from a `cvedb.models.ToolImport`
with `create_private_tool` and `update_private_tool`; the tool's category
is looked up by name and its output type mapped to the API's code.

## Text output

`cvedb.display` renders spaces, projects, workflows, tools and modules as
trees, to standard output or to a given stream:

```python
import sys
from cvedb.display import print_spaces

print_spaces(accounts.get_spaces(), sys.stdout)
```

## What this package does not do

It has no methods of its own for fetching, renaming, deleting or saving
workflows and workflow versions; workflow version JSON has to be obtained
and sent with `BaseClient.request`. It does not upload or download files,
does not watch a run live, and has no command-line program.

## Running the tests

```
pip install -e ".[test]"
pytest
```