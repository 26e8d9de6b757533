# spider

Building blocks for a distributed task execution system: records for data,
drivers, schedulers and jobs; task and task-graph models; a registry of task
functions; and the msgpack messages exchanged when a task function is
invoked.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `spider.data`: `Data` (a value with an id and locality preferences),
  `Driver`, `Scheduler`, `JobMetadata`, `JobStatus`, `KeyValueData`, and the
  `StorageError` exception with its `StorageErrorType`.
- `spider.task`: `Task`, `TaskInput`, `TaskOutput`, `TaskInstance` and
  `TaskState`. A `TaskInput` is bound to a parent's output with
  `set_output(task_id, position)`; the position must lie in 0..255.
- `spider.task_graph`: `TaskGraph` holds tasks keyed by id, parent/child
  dependencies, and lists of input and output tasks. `add_task` raises
  `ValueError` for a task already present; `add_child_task` raises
  `KeyError` for a missing parent. `child_tasks` and `parent_tasks` follow
  the edges, and `reset_ids()` gives every task a fresh id and rewrites every
  reference to it.
- `spider.messages`: `ResponseType` and `RequestType`, with
  `get_response_type`, `get_request_type` and `get_message_body` to read a
  message's header and body. Malformed msgpack raises `ValueError`.
- `spider.function_manager`: `FunctionManager` (with a shared
  `FunctionManager.instance()`) maps names to invokers and functions back to
  names; the `register_task` decorator registers a function under its own
  name. `invoke_function` runs a function on a packed argument array and
  returns a packed response. Helpers build and read responses and requests:
  `create_result_response`, `response_get_result`,
  `response_get_result_buffers`, `create_error_response`,
  `response_get_error`, `create_error_buffer`, `create_args_buffer`,
  `create_args_request` and `create_args_request_from_buffers`.

## Example

```python
from spider.function_manager import (
    FunctionManager,
    create_args_buffer,
    register_task,
    response_get_result,
)


@register_task
def add(context, x: int, y: int) -> int:
    return x + y


invoker = FunctionManager.instance().get_function("add")
response = invoker(None, create_args_buffer(1, 2))
assert response_get_result(response) == 3
```

A task function takes a task context first, followed by its arguments.
Parameters annotated with `Data` are loaded through
`context.data_store.get_data(data_id)`, and parameters annotated with
`uuid.UUID` receive the id itself. Failures while parsing arguments, running
the function or packing its result come back as error responses, which
`response_get_error` turns into a `(FunctionInvokeError, message)` pair.

## What this package does not do

The package provides models and message formats only. It has no worker or
scheduler process and no command to start one, does not launch task
executors, does not send or receive messages over pipes or sockets, and
ships no storage backend: the data store handed to a task context must be
supplied by the caller.