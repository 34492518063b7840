"""Task runner for building the project and learning its datasets."""

from pasta.tasks.registry import Task, TaskRegistry
from pasta.tasks.shell import Sh, sh

__all__ = ["Sh", "Task", "TaskRegistry", "sh"]
