"""A directed graph of tasks and their dependencies."""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field

from spider.task import Task


@dataclass
class TaskGraph:
    """Tasks keyed by id, parent/child edges and the graph's entry and exit tasks."""

    tasks: dict[uuid.UUID, Task] = field(default_factory=dict)
    dependencies: list[tuple[uuid.UUID, uuid.UUID]] = field(default_factory=list)
    input_tasks: list[uuid.UUID] = field(default_factory=list)
    output_tasks: list[uuid.UUID] = field(default_factory=list)

    def add_child_task(self, task: Task, parents: list[uuid.UUID]) -> None:
        """Add a copy of ``task`` with an edge from each of ``parents``.

        Raises KeyError if a parent is missing and ValueError if the task exists.
        """
        missing = [parent for parent in parents if parent not in self.tasks]
        if missing:
            raise KeyError(missing[0])
        self.add_task(task)
        self.dependencies.extend((parent, task.id) for parent in parents)

    def add_task(self, task: Task) -> None:
        """Add a copy of ``task``; the caller adds its dependencies."""
        if task.id in self.tasks:
            raise ValueError(f"task {task.id} already in graph")
        self.tasks[task.id] = copy.deepcopy(task)

    def add_dependency(self, parent: uuid.UUID, child: uuid.UUID) -> None:
        self.dependencies.append((parent, child))

    def get_task(self, task_id: uuid.UUID) -> Task | None:
        return self.tasks.get(task_id)

    def child_tasks(self, task_id: uuid.UUID) -> list[uuid.UUID]:
        return [child for parent, child in self.dependencies if parent == task_id]

    def parent_tasks(self, task_id: uuid.UUID) -> list[uuid.UUID]:
        return [parent for parent, child in self.dependencies if child == task_id]

    def add_input_task(self, task_id: uuid.UUID) -> None:
        self.input_tasks.append(task_id)

    def add_output_task(self, task_id: uuid.UUID) -> None:
        self.output_tasks.append(task_id)

    def reset_ids(self) -> None:
        """Give every task a fresh id and rewrite all references to it.

        Raises KeyError if an edge, an input binding or an entry/exit task
        refers to a task that is not in the graph; the graph is then unchanged.
        """
        new_ids = {old_id: uuid.uuid4() for old_id in self.tasks}

        new_dependencies = [
            (new_ids[parent], new_ids[child]) for parent, child in self.dependencies
        ]
        new_inputs = [new_ids[task_id] for task_id in self.input_tasks]
        new_outputs = [new_ids[task_id] for task_id in self.output_tasks]

        new_tasks: dict[uuid.UUID, Task] = {}
        for old_id, task in self.tasks.items():
            renamed = copy.deepcopy(task)
            renamed.id = new_ids[old_id]
            for task_input in renamed.inputs:
                if task_input.task_output is not None:
                    source_id, position = task_input.task_output
                    task_input.set_output(new_ids[source_id], position)
            new_tasks[renamed.id] = renamed

        self.tasks = new_tasks
        self.dependencies = new_dependencies
        self.input_tasks = new_inputs
        self.output_tasks = new_outputs