"""Library workflows, tools, modules and categories, and private tools."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from typing import Iterator

from cvedb.models import NIL_UUID, Category, Module, Tool, ToolImport, Workflow
from cvedb.transport import ApiError, BaseClient

TOOL_OUTPUT_TYPES = {"file": "2", "folder": "3"}


def _rewrap(exc: Exception, prefix: str) -> Exception:
    message = f"{prefix}: {exc}"
    if isinstance(exc, ApiError):
        return ApiError(message, exc.status_code)
    return type(exc)(message)


@contextmanager
def _failing(prefix: str) -> Iterator[None]:
    try:
        yield
    except (ApiError, LookupError) as exc:
        raise _rewrap(exc, prefix) from exc


class CatalogApi(BaseClient):
    """Operations on the shared library and on the vault's private tools."""

    def _workflows(self, path: str) -> list[Workflow]:
        with _failing("failed to get workflows"):
            return [Workflow.from_dict(item) for item in self.paginate(path)]

    def _tools(self, path: str, what: str = "tools") -> list[Tool]:
        with _failing(f"failed to get {what}"):
            return [Tool.from_dict(item) for item in self.paginate(path)]

    def _modules(self, path: str) -> list[Module]:
        with _failing("failed to get modules"):
            return [Module.from_dict(item) for item in self.paginate(path)]

    def list_library_workflows(self) -> list[Workflow]:
        """Return every workflow in the library."""
        return self._workflows("/library/workflow/")

    def search_library_workflows(self, search: str) -> list[Workflow]:
        """Return library workflows matching a search query."""
        return self._workflows(f"/library/workflow/?search={search}")

    def get_library_workflow_by_name(self, name: str) -> Workflow:
        """Return the library workflow with exactly the given name."""
        for workflow in self.search_library_workflows(name):
            if workflow.name == name:
                return workflow
        raise LookupError(f"workflow {name} was not found in the library")

    def copy_workflow_from_library(
        self,
        workflow_id: uuid.UUID,
        space_id: uuid.UUID,
        project_id: uuid.UUID | None = None,
    ) -> Workflow:
        """Copy a library workflow into a space and, optionally, a project."""
        destination = {"space_info": str(space_id)}
        if project_id is not None and project_id != NIL_UUID:
            destination["project_info"] = str(project_id)
        with _failing("failed to copy workflow"):
            data = self.request("POST", f"/library/workflow/{workflow_id}/copy/", destination)
        return Workflow.from_dict(data or {})

    def list_library_tools(self) -> list[Tool]:
        """Return every tool in the library."""
        return self._tools("/library/tool/")

    def search_library_tools(self, search: str) -> list[Tool]:
        """Return library tools matching a search query."""
        return self._tools(f"/library/tool/?search={search}")

    def get_library_tool_by_name(self, name: str) -> Tool:
        """Return the first library tool the API finds under a name."""
        tools = self._tools(f"/library/tool/?name={name}", "tool")
        if not tools:
            raise LookupError(f"tool {name} was not found in the library")
        return tools[0]

    def list_library_modules(self) -> list[Module]:
        """Return every module in the library."""
        return self._modules("/library/module/")

    def search_library_modules(self, search: str) -> list[Module]:
        """Return library modules matching a search query."""
        return self._modules(f"/library/module/?search={search}")

    def get_library_category_by_name(self, name: str) -> Category:
        """Return the first library category the API finds under a name."""
        with _failing("failed to get categories"):
            items = self.paginate(f"/library/categories/?name={name}")
        if not items:
            raise LookupError(f"category {name} was not found in the library")
        return Category.from_dict(items[0])

    def list_private_tools(self) -> list[Tool]:
        """Return the tools private to the vault."""
        return self._tools(f"/library/tool/?public=False&vault={self.vault_id}")

    def get_private_tool_by_name(self, name: str) -> Tool:
        """Return the first private tool the API finds under a name."""
        tools = self._tools(
            f"/library/tool/?public=False&vault={self.vault_id}&name={name}", "tool"
        )
        if not tools:
            raise LookupError(f'couldn\'t find tool "{name}"')
        return tools[0]

    def _prepare_tool_import(self, tool: ToolImport) -> ToolImport:
        tool.vault_info = self.vault_id
        with _failing(f'couldn\'t use the category "{tool.category}"'):
            category = self.get_library_category_by_name(tool.category)
        tool.category_id = category.id
        tool.output_type = TOOL_OUTPUT_TYPES.get(tool.output_type, "")
        for node_input in tool.inputs.values():
            if node_input.visible is None:
                node_input.visible = False
            node_input.type = node_input.type.upper()
        return tool

    def create_private_tool(self, tool: ToolImport) -> ToolImport:
        """Create a private tool in the vault."""
        with _failing("failed to prepare tool import"):
            tool = self._prepare_tool_import(tool)
        with _failing("failed to create private tool"):
            data = self.request("POST", "/library/tool/", tool)
        return ToolImport.from_dict(data or {})

    def update_private_tool(self, tool: ToolImport, tool_id: uuid.UUID) -> ToolImport:
        """Update a private tool in the vault."""
        with _failing("failed to prepare tool import"):
            tool = self._prepare_tool_import(tool)
        with _failing("failed to update private tool"):
            data = self.request("PATCH", f"/library/tool/{tool_id}/", tool)
        return ToolImport.from_dict(data or {})

    def delete_private_tool(self, tool_id: uuid.UUID) -> None:
        """Delete a private tool."""
        with _failing("failed to delete private tool"):
            self.request("DELETE", f"/library/tool/{tool_id}/")