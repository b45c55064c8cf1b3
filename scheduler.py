"""
Deadline-based one-shot tasks driven by the session loop.

A task fires once when its deadline passes and is then re-armed ``interval``
seconds later. The default interval is long enough to leave the task dormant
for the rest of a normal session.
"""

import enum
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Set

import constants as cv


class TaskId(enum.Enum):
    SETUP = "setup"
    RESCAN = "rescan"


@dataclass
class ScheduledTask:
    deadline: float
    interval: float = cv.DORMANT_INTERVAL
    fired: bool = False


class ScheduledTaskRunner:
    """Tracks the deadlines of the session's scheduled tasks"""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self.tasks: Dict[TaskId, ScheduledTask] = {}

    @classmethod
    def for_session(cls, settings, clock: Callable[[], float] = time.monotonic, now=None):
        """Arm the setup and rescan tasks for a new session

        Args:
            settings: PlayerSettings with tick_rate, rescan_delay, rescan_interval
            clock: Monotonic time source
            now: Start time, defaults to ``clock()``
        """
        runner = cls(clock)
        now = clock() if now is None else now
        runner.arm(TaskId.SETUP, settings.tick_rate, now=now)
        runner.arm(
            TaskId.RESCAN,
            settings.rescan_delay,
            interval=settings.rescan_interval or cv.DORMANT_INTERVAL,
            now=now,
        )
        return runner

    def arm(
        self,
        task_id: TaskId,
        delay: float,
        interval: float = cv.DORMANT_INTERVAL,
        now: Optional[float] = None,
    ) -> ScheduledTask:
        """Schedule *task_id* to fire *delay* seconds from now"""
        if interval <= 0:
            raise ValueError(f"interval must be positive, got: {interval}")
        now = self.clock() if now is None else now
        task = ScheduledTask(deadline=now + max(0.0, delay), interval=interval)
        self.tasks[task_id] = task
        return task

    def has_fired(self, task_id: TaskId) -> bool:
        """Whether *task_id* fired since it was last armed"""
        task = self.tasks.get(task_id)
        return task is not None and task.fired

    def poll(self, now: Optional[float] = None) -> Set[TaskId]:
        """Return the tasks whose deadline has passed and re-arm them

        Each due task is marked fired and its deadline moves to
        ``now + interval``.
        """
        now = self.clock() if now is None else now
        due = set()
        for task_id, task in self.tasks.items():
            if now >= task.deadline:
                task.fired = True
                task.deadline = now + task.interval
                due.add(task_id)
        return due

    def next_deadline(self) -> Optional[float]:
        if not self.tasks:
            return None
        return min(task.deadline for task in self.tasks.values())

    def seconds_until_next(self, now: Optional[float] = None) -> Optional[float]:
        """Time left before the next task is due, floored at zero"""
        deadline = self.next_deadline()
        if deadline is None:
            return None
        now = self.clock() if now is None else now
        return max(0.0, deadline - now)
