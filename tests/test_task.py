import dataclasses
import uuid

import pytest

from spider.task import Task, TaskInput, TaskInstance, TaskOutput, TaskState


def test_task_input_only_type():
    task_input = TaskInput("int")
    assert task_input.type == "int"
    assert task_input.task_output is None
    assert task_input.value is None
    assert task_input.data_id is None


def test_task_input_set_output():
    parent = uuid.uuid4()
    task_input = TaskInput("int")
    task_input.set_output(parent, 2)
    assert task_input.task_output == (parent, 2)


@pytest.mark.parametrize("position", [-1, 256])
def test_task_input_set_output_rejects_bad_position(position):
    task_input = TaskInput("int")
    with pytest.raises(ValueError):
        task_input.set_output(uuid.uuid4(), position)
    assert task_input.task_output is None


def test_task_input_constructor_rejects_bad_position():
    with pytest.raises(ValueError):
        TaskInput("int", task_output=(uuid.uuid4(), 300))


def test_task_input_value_and_data_id():
    data_id = uuid.uuid4()
    task_input = TaskInput("int", value=b"\x01")
    task_input.data_id = data_id
    assert task_input.value == b"\x01"
    assert task_input.data_id == data_id


def test_task_output_fields():
    data_id = uuid.uuid4()
    output = TaskOutput("Data", data_id=data_id)
    assert output.type == "Data"
    assert output.data_id == data_id
    assert output.value is None


def test_task_instance_ids():
    task_id = uuid.uuid4()
    first = TaskInstance(task_id)
    second = TaskInstance(task_id)
    assert first.task_id == second.task_id == task_id
    assert first.id != second.id
    explicit = uuid.uuid4()
    assert TaskInstance(task_id, explicit).id == explicit


def test_task_instance_is_immutable():
    task_id = uuid.uuid4()
    instance = TaskInstance(task_id)
    with pytest.raises(dataclasses.FrozenInstanceError):
        instance.id = uuid.uuid4()
    assert instance.task_id == task_id


def test_task_defaults():
    task = Task("sum")
    assert task.function_name == "sum"
    assert task.state is TaskState.PENDING
    assert task.timeout == 0.0
    assert task.max_retries == 0
    assert task.inputs == []
    assert task.outputs == []


def test_tasks_get_distinct_ids():
    ids = {Task("f").id for _ in range(10)}
    assert len(ids) == 10


def test_task_explicit_fields():
    task_id = uuid.uuid4()
    task = Task("f", task_id, TaskState.RUNNING, 1.5)
    assert task.id == task_id
    assert task.state is TaskState.RUNNING
    assert task.timeout == 1.5


def test_task_add_inputs_and_outputs_in_order():
    task = Task("f")
    task.add_input(TaskInput("a"))
    task.add_input(TaskInput("b"))
    task.add_output(TaskOutput("c"))
    assert [i.type for i in task.inputs] == ["a", "b"]
    assert [o.type for o in task.outputs] == ["c"]


def test_task_inputs_not_shared():
    first = Task("f")
    second = Task("f")
    first.add_input(TaskInput("a"))
    assert second.inputs == []


def test_task_rejects_negative_retries():
    with pytest.raises(ValueError):
        Task("f", max_retries=-1)