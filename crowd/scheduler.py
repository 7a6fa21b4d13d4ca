#!/usr/bin/env python3
"""
Deferred tasks checked against the simulation clock.

Transient modes (gathering after a spawn, the quick clear before a restart)
end through records kept here instead of free-running timers. The owner calls
run_due(now) once per frame; a task bound to a body is dropped when that body
is removed, so it can never act on a body that no longer exists.
"""
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

_task_ids = itertools.count(1)


@dataclass(order=True)
class DeferredTask:
    due_at: float
    seq: int = field(default_factory=lambda: next(_task_ids))
    action: Callable[[], None] = field(default=lambda: None, compare=False)
    body_id: Optional[int] = field(default=None, compare=False)
    label: str = field(default="", compare=False)


class DeferredTasks:
    def __init__(self):
        self._tasks: List[DeferredTask] = []

    def __len__(self) -> int:
        return len(self._tasks)

    def schedule(self, due_at: float, action: Callable[[], None],
                 body_id: Optional[int] = None, label: str = "") -> DeferredTask:
        task = DeferredTask(due_at=due_at, action=action, body_id=body_id, label=label)
        self._tasks.append(task)
        return task

    def pending_for(self, body_id: int) -> List[DeferredTask]:
        return [t for t in self._tasks if t.body_id == body_id]

    def drop_for(self, body_id: int) -> int:
        """Discard every pending task bound to body_id; returns how many."""
        before = len(self._tasks)
        self._tasks = [t for t in self._tasks if t.body_id != body_id]
        return before - len(self._tasks)

    def cancel(self, task: DeferredTask) -> bool:
        for i, t in enumerate(self._tasks):
            if t is task:
                del self._tasks[i]
                return True
        return False

    def run_due(self, now: float) -> int:
        """Run, in due order, every task whose time has come."""
        ran = 0
        for task in sorted(t for t in self._tasks if t.due_at <= now):
            # an earlier action may have dropped this task along with its body
            if not any(t is task for t in self._tasks):
                continue
            self._tasks.remove(task)
            logger.debug("Running deferred task %s (due %.1f)", task.label or task.seq, task.due_at)
            task.action()
            ran += 1
        return ran
