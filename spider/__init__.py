"""Task and task-graph models, a task function registry and task invocation messages."""

__version__ = "0.1.0"