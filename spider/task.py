"""Tasks, their inputs and outputs, and their execution instances."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import IntEnum

_MAX_POSITION = 0xFF


def _check_position(position: int) -> None:
    if not 0 <= position <= _MAX_POSITION:
        raise ValueError(f"output position {position} out of range 0..{_MAX_POSITION}")


@dataclass
class TaskInput:
    """One argument of a task: a parent's output, a packed value or a data id."""

    type: str
    task_output: tuple[uuid.UUID, int] | None = None
    value: bytes | None = None
    data_id: uuid.UUID | None = None

    def __post_init__(self) -> None:
        if self.task_output is not None:
            _check_position(self.task_output[1])

    def set_output(self, task_id: uuid.UUID, position: int) -> None:
        """Bind this input to output ``position`` of task ``task_id``."""
        _check_position(position)
        self.task_output = (task_id, position)


@dataclass
class TaskOutput:
    """One result of a task: a packed value or a data id."""

    type: str
    value: bytes | None = None
    data_id: uuid.UUID | None = None


@dataclass(frozen=True)
class TaskInstance:
    """A single attempt at running a task."""

    task_id: uuid.UUID
    id: uuid.UUID = field(default_factory=uuid.uuid4)


class TaskState(IntEnum):
    """Lifecycle state of a task."""

    PENDING = 0
    READY = 1
    RUNNING = 2
    SUCCEED = 3
    FAILED = 4
    CANCELED = 5


@dataclass
class Task:
    """A call of a registered function with its inputs and outputs."""

    function_name: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    state: TaskState = TaskState.PENDING
    timeout: float = 0.0
    max_retries: int = 0
    inputs: list[TaskInput] = field(default_factory=list)
    outputs: list[TaskOutput] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must not be negative")

    def add_input(self, task_input: TaskInput) -> None:
        self.inputs.append(task_input)

    def add_output(self, task_output: TaskOutput) -> None:
        self.outputs.append(task_output)