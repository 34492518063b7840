# Copyright (c) Syntropy Systems
"""Named tasks with prerequisites."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from pasta.errors import TaskCycleError, TaskNotFoundError

logger = logging.getLogger(__name__)

TaskAction = Callable[[], None]


@dataclass
class Task:
    """A named unit of work."""

    name: str
    action: TaskAction | None = None
    description: str | None = None
    prerequisites: list[str] = field(default_factory=list)


class TaskRegistry:
    """Holds tasks and invokes them with their prerequisites.

    Within one invocation every task runs at most once, after all of its
    prerequisites, which run depth-first in declared order.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}

    def define(
        self,
        name: str,
        action: TaskAction | None = None,
        description: str | None = None,
        prerequisites: list[str] | None = None,
    ) -> Task:
        """Register a task, replacing any task of the same name."""
        task = Task(
            name=name,
            action=action,
            description=description,
            prerequisites=list(prerequisites or []),
        )
        self._tasks[name] = task
        return task

    def task(
        self,
        name: str,
        description: str | None = None,
        prerequisites: list[str] | None = None,
    ) -> Callable[[TaskAction], TaskAction]:
        """Decorator form of define()."""

        def decorator(action: TaskAction) -> TaskAction:
            _ = self.define(name, action, description, prerequisites)
            return action

        return decorator

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __getitem__(self, name: str) -> Task:
        try:
            return self._tasks[name]
        except KeyError:
            raise TaskNotFoundError(name) from None

    @property
    def names(self) -> list[str]:
        return list(self._tasks)

    def describe(self) -> list[tuple[str, str]]:
        """List (name, description) of described tasks, sorted by name."""
        return sorted(
            (task.name, task.description)
            for task in self._tasks.values()
            if task.description
        )

    def plan(self, name: str) -> list[str]:
        """Return the order in which invoke(name) runs tasks.

        Raises:
            TaskNotFoundError: If a task or prerequisite is unknown.
            TaskCycleError: If prerequisites form a cycle.

        """
        order: list[str] = []
        self._visit(name, [], order)
        return order

    def _visit(self, name: str, stack: list[str], order: list[str]) -> None:
        if name in stack:
            raise TaskCycleError([*stack[stack.index(name):], name])
        if name in order:
            return
        task = self[name]
        stack.append(name)
        for prerequisite in task.prerequisites:
            self._visit(prerequisite, stack, order)
        _ = stack.pop()
        order.append(name)

    def invoke(self, name: str) -> list[str]:
        """Run a task after its prerequisites.

        The whole plan is resolved first, so an unknown task or a cycle is
        reported before anything runs. A failing action stops the invocation
        and its exception propagates.

        Returns:
            Names of the tasks that ran, in order.

        """
        order = self.plan(name)
        for task_name in order:
            task = self._tasks[task_name]
            logger.info("Running task %s", task_name)
            if task.action is not None:
                task.action()
        return order
