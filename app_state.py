"""
Application state and the actions that mutate it.

Only the session loop calls these actions, so the state needs no locking. The
one hand-off is ``play``: the backend command runs on the executor and its
outcome is applied later by ``collect_playback`` on the loop thread.
"""

import os
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, List, Optional

import constants as cv
from library import list_entries
from logging_config import (
    BackendError,
    BackendUnavailable,
    EmptyListError,
    InvalidSelection,
    LibraryScanError,
    TapedeckError,
    get_logger,
)
from selection_list import SelectionList

logger = get_logger("state")


@dataclass
class PendingPlay:
    """A play command handed to the backend but not yet confirmed"""

    label: str
    path: str
    future: Future
    # pause or resume commanded while the play was loading
    paused: Optional[bool] = None


class ApplicationState:
    """Library listing, playback status and the actions that change them"""

    def __init__(
        self,
        scan_root: str,
        backend=None,
        executor=None,
        lister: Optional[Callable[[str], List[str]]] = None,
    ):
        self.library: SelectionList[str] = SelectionList.with_items([cv.PLACEHOLDER_ENTRY])
        self.scan_root = scan_root
        self.is_paused = False
        self.now_playing = cv.NOTHING_PLAYING
        self.status = ""
        self.last_error: Optional[TapedeckError] = None
        self.scanned = False
        self.pending_play: Optional[PendingPlay] = None
        self.backend = backend
        self.executor = executor
        self.lister = lister or list_entries

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _report(self, error: TapedeckError) -> bool:
        """Record a recovered error for display and return False"""
        self.last_error = error
        self.status = str(error)
        logger.warning(f"{type(error).__name__}: {error}")
        return False

    def _succeed(self, status: str = "") -> bool:
        self.last_error = None
        self.status = status
        return True

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def navigate_down(self) -> None:
        try:
            index = self.library.advance()
        except EmptyListError:
            return
        logger.debug(f"Cursor moved down to {index}")

    def navigate_up(self) -> None:
        try:
            index = self.library.retreat()
        except EmptyListError:
            return
        logger.debug(f"Cursor moved up to {index}")

    def setup(self) -> None:
        """Place the initial cursor"""
        try:
            self.library.advance()
        except EmptyListError:
            logger.debug("Setup skipped, library is empty")

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    def _require_backend(self):
        if self.backend is None:
            raise BackendUnavailable("Playback is unavailable")
        return self.backend

    def _resolve_selection(self):
        """Return (label, absolute path) of the selected entry

        Raises:
            InvalidSelection: If nothing playable is selected
        """
        if not self.scanned:
            raise InvalidSelection("Library is still loading")
        label = self.library.selected()
        if label is None:
            raise InvalidSelection("No track selected")
        return label, os.path.join(self.scan_root, label)

    def play(self) -> bool:
        """Send the selected track to the backend

        The command runs on the executor; ``now_playing`` and ``is_paused``
        only change once ``collect_playback`` sees it succeed.

        Returns:
            bool: True if the command was dispatched
        """
        try:
            label, path = self._resolve_selection()
            backend = self._require_backend()
        except TapedeckError as e:
            return self._report(e)

        if self.executor is None:
            return self._report(BackendUnavailable("Playback is unavailable"))

        future = self.executor.submit(backend.play, path)
        self.pending_play = PendingPlay(label=label, path=path, future=future)
        logger.info(f"Play dispatched: {path}")
        return self._succeed(f"Loading {label}")

    def collect_playback(self) -> bool:
        """Apply the outcome of a finished play command

        Returns:
            bool: True if state changed
        """
        pending = self.pending_play
        if pending is None or not pending.future.done():
            return False

        self.pending_play = None
        error = pending.future.exception()
        if error is not None:
            if not isinstance(error, TapedeckError):
                error = BackendError(f"Playback failed: {error}")
            self._report(error)
            return True

        self.now_playing = pending.label
        self.is_paused = bool(pending.paused)
        self._succeed("Paused" if self.is_paused else f"Playing {pending.label}")
        logger.info(f"Now playing: {pending.label}")
        return True

    def _mark_pending(self, paused: bool) -> None:
        if self.pending_play is not None:
            self.pending_play.paused = paused

    def pause(self) -> bool:
        try:
            self._require_backend().pause()
        except TapedeckError as e:
            return self._report(e)
        self.is_paused = True
        self._mark_pending(True)
        return self._succeed("Paused")

    def unpause(self) -> bool:
        try:
            self._require_backend().resume()
        except TapedeckError as e:
            return self._report(e)
        self.is_paused = False
        self._mark_pending(False)
        return self._succeed("Resumed")

    # ------------------------------------------------------------------
    # Library
    # ------------------------------------------------------------------

    def rescan(self) -> bool:
        """Reload the library from the scan root and reselect

        On failure the previous listing stays in place.
        """
        try:
            entries = self.lister(self.scan_root)
        except LibraryScanError as e:
            return self._report(e)

        self.library = SelectionList.with_items(entries)
        self.scanned = True
        self.setup()
        logger.info(f"Rescanned {self.scan_root}: {len(entries)} entries")
        if not entries:
            return self._succeed(f"No tracks in {self.scan_root}")
        if isinstance(self.last_error, LibraryScanError):
            self._succeed()
        return True

    def shutdown(self) -> None:
        """Stop playback when the session ends"""
        if self.pending_play is not None:
            self.pending_play.future.cancel()
            self.pending_play = None
        if self.backend is None:
            return
        try:
            self.backend.stop()
        except BackendError as e:
            logger.warning(f"Stop failed during shutdown: {e}")
