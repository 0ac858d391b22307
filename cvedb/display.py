"""Tree-shaped text listings of spaces, projects, workflows, tools and modules."""

from __future__ import annotations

import sys
from typing import Any, Iterable, TextIO

from cvedb.models import Module, Project, Space, Tool, Workflow

SPACE_EMOJI = "\U0001f4c2"
PROJECT_EMOJI = "\U0001f5c2"
WORKFLOW_EMOJI = "\U0001f9be"
MODULE_EMOJI = "\U0001f916"
INPUT_EMOJI = "\U0001f4e5"
OUTPUT_EMOJI = "\U0001f4e4"
DESCRIPTION_EMOJI = "\U0001f4cb"
FILE_EMOJI = "\U0001f4c4"
SIZE_EMOJI = "\U0001f522"
DATE_EMOJI = "\U0001f4c5"

_LINK = "\u2502   "
_BLANK = "    "
_MID = "\u251c\u2500\u2500"
_END = "\u2514\u2500\u2500"


class Tree:
    """A labelled tree that renders with box-drawing edges."""

    def __init__(self, value: Any = ".") -> None:
        self.value = value
        self.children: list[Tree] = []

    def add_node(self, value: Any) -> Tree:
        """Add a leaf and return this tree, so calls can be chained."""
        self.children.append(Tree(value))
        return self

    def add_branch(self, value: Any) -> Tree:
        """Add a child and return it."""
        branch = Tree(value)
        self.children.append(branch)
        return branch

    def render(self) -> str:
        lines = [str(self.value)]
        self._render_children(lines, ())
        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        return self.render()

    def _render_children(self, lines: list[str], ended: tuple[bool, ...]) -> None:
        prefix = "".join(_BLANK if done else _LINK for done in ended)
        for position, child in enumerate(self.children):
            last = position == len(self.children) - 1
            first, *rest = str(child.value).split("\n")
            pad = prefix + (_BLANK if last else _LINK)
            text = "\n".join([first, *(pad + line for line in rest)])
            lines.append(f"{prefix}{_END if last else _MID} {text}")
            child._render_children(lines, ended + (last,))


def _italic(text: str) -> str:
    return f"{DESCRIPTION_EMOJI} \033[3m{text}\033[0m"


def _emit(tree: Tree, out: TextIO | None) -> None:
    (out if out is not None else sys.stdout).write(tree.render() + "\n")


def _add_workflows(tree: Tree, workflows: Iterable[Workflow]) -> None:
    for workflow in workflows:
        branch = tree.add_branch(f"{WORKFLOW_EMOJI} {workflow.name}")
        if workflow.description:
            branch.add_node(_italic(workflow.description))


def print_modules(modules: Iterable[Module], out: TextIO | None = None) -> None:
    """Write modules with their inputs and outputs."""
    tree = Tree("Modules")
    for module in modules:
        branch = tree.add_branch(f"{MODULE_EMOJI} {module.name}")
        if module.description:
            branch.add_node(_italic(module.description))
        inputs = branch.add_branch(f"{INPUT_EMOJI} Inputs")
        for node_input in module.inputs.values():
            inputs.add_node(node_input.name)
        outputs = branch.add_branch(f"{OUTPUT_EMOJI} Outputs")
        for node_output in module.outputs.values():
            outputs.add_node(node_output.parameter_name or "")
    _emit(tree, out)


def print_project(project: Project, out: TextIO | None = None) -> None:
    """Write a project and its workflows."""
    tree = Tree(f"{PROJECT_EMOJI}  {project.name}")
    if project.description:
        tree.add_node(_italic(project.description))
    if project.workflows:
        _add_workflows(tree.add_branch("Workflows"), project.workflows)
    _emit(tree, out)


def print_space(space: Space, out: TextIO | None = None) -> None:
    """Write a space with its projects and workflows."""
    tree = Tree(f"{SPACE_EMOJI} {space.name}")
    if space.description:
        tree.add_node(_italic(space.description))
    if space.projects:
        projects = tree.add_branch("Projects")
        for project in space.projects:
            branch = projects.add_branch(f"{PROJECT_EMOJI}  {project.name}")
            if project.description:
                branch.add_node(_italic(project.description))
    if space.workflows:
        _add_workflows(tree.add_branch("Workflows"), space.workflows)
    _emit(tree, out)


def print_spaces(spaces: Iterable[Space], out: TextIO | None = None) -> None:
    """Write a list of spaces."""
    tree = Tree("Spaces")
    for space in spaces:
        branch = tree.add_branch(f"{SPACE_EMOJI} {space.name}")
        if space.description:
            branch.add_node(_italic(space.description))
    _emit(tree, out)


def print_tools(tools: Iterable[Tool], out: TextIO | None = None) -> None:
    """Write a list of tools with their source and description."""
    tree = Tree("Tools")
    for tool in tools:
        source = tool.source_url.removeprefix("https://")
        tree.add_branch(f"{tool.name} [{source}]").add_node(_italic(tool.description))
    _emit(tree, out)


def print_workflow(workflow: Workflow, out: TextIO | None = None) -> None:
    """Write one workflow with its description and author."""
    tree = Tree(f"{WORKFLOW_EMOJI} {workflow.name}")
    if workflow.description:
        tree.add_node(_italic(workflow.description))
    tree.add_node(f"Author: {workflow.author}")
    _emit(tree, out)


def print_workflows(workflows: Iterable[Workflow], out: TextIO | None = None) -> None:
    """Write a list of workflows."""
    tree = Tree("Workflows")
    _add_workflows(tree, workflows)
    _emit(tree, out)