"""
Interactive session: the loop that multiplexes key presses, scheduled tasks
and rendering.

Each iteration collects finished play commands, draws the current state,
waits for a key for at most one tick, dispatches it and then runs whatever
scheduled task is due.
"""

import enum
import time
from concurrent.futures import ThreadPoolExecutor
from functools import partial

import audio_backend
import constants as cv
from app_state import ApplicationState
from library import list_entries
from logging_config import BackendUnavailable, get_logger
from render import RenderAdapter
from scheduler import ScheduledTaskRunner, TaskId
from terminal import Terminal

logger = get_logger("session")


class SessionStatus(enum.Enum):
    RUNNING = "running"
    QUITTING = "quitting"


class SessionController:
    """Owns the application state for the lifetime of one session"""

    def __init__(
        self,
        state,
        terminal,
        runner,
        renderer=None,
        tick_rate=cv.TICK_RATE,
        clock=time.monotonic,
    ):
        self.state = state
        self.terminal = terminal
        self.runner = runner
        self.renderer = renderer or RenderAdapter(terminal)
        self.tick_rate = tick_rate
        self.clock = clock
        self.status = SessionStatus.RUNNING

        self.key_actions = {
            cv.KEY_DOWN: self.state.navigate_down,
            cv.KEY_UP: self.state.navigate_up,
            cv.KEY_ENTER: self.state.play,
            "p": self.state.pause,
            "o": self.state.unpause,
        }
        self.task_actions = {
            TaskId.SETUP: self.state.setup,
            TaskId.RESCAN: self.state.rescan,
        }

    def quit(self) -> None:
        self.status = SessionStatus.QUITTING
        logger.info("Quit requested")

    def handle_key(self, key) -> None:
        """Dispatch one key press; unknown keys are ignored"""
        if key == "q":
            self.quit()
            return
        action = self.key_actions.get(key)
        if action is not None:
            action()

    def _poll_timeout(self) -> float:
        """Time to wait for input: until the next task, at most one tick"""
        remaining = self.runner.seconds_until_next(self.clock())
        if remaining is None:
            return self.tick_rate
        return min(remaining, self.tick_rate)

    def run_scheduled(self) -> None:
        # SETUP runs before RESCAN when both are due
        for task_id in sorted(self.runner.poll(self.clock()), key=lambda t: t is TaskId.RESCAN):
            logger.debug(f"Scheduled task fired: {task_id.value}")
            self.task_actions[task_id]()

    def step(self) -> None:
        """One loop iteration"""
        self.state.collect_playback()
        self.renderer.draw(self.state)

        try:
            key = self.terminal.poll_key(self._poll_timeout())
        except EOFError:
            logger.info("Input closed, ending session")
            self.quit()
            return

        if key is not None:
            self.handle_key(key)
            if self.status is SessionStatus.QUITTING:
                return

        self.run_scheduled()

    def run(self) -> None:
        """Loop until the user quits, then stop playback"""
        logger.info(f"Session started on {self.state.scan_root}")
        try:
            while self.status is SessionStatus.RUNNING:
                self.step()
        finally:
            self.state.shutdown()
            logger.info("Session ended")


def run_session(settings) -> None:
    """Run one interactive session with the given settings

    The backend, the play executor and the terminal are acquired once and
    released on every exit path.

    Raises:
        TerminalSetupError: If the terminal cannot be prepared
    """
    try:
        backend = audio_backend.open_backend()
    except BackendUnavailable as e:
        logger.error(f"Backend unavailable: {e}")
        backend = None
        notice = str(e)
    else:
        notice = ""

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="tapedeck-play")
    try:
        state = ApplicationState(
            settings.library,
            backend=backend,
            executor=executor,
            lister=partial(
                list_entries,
                sort=settings.sort_library,
                show_hidden=settings.show_hidden,
            ),
        )
        state.status = notice
        runner = ScheduledTaskRunner.for_session(settings)
        with Terminal() as terminal:
            controller = SessionController(
                state,
                terminal,
                runner,
                tick_rate=settings.tick_rate,
            )
            controller.run()
    finally:
        executor.shutdown(wait=True, cancel_futures=True)
        if backend is not None:
            backend.close()
