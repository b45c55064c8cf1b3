"""
Audio playback backend built on VLC.

One ``VlcBackend`` is opened per session and shared by every command. ``play``
waits for VLC to report that the media actually started, so callers run it on
a worker thread and pick the outcome up from the returned future.
"""

import os
import threading
import time

import constants as cv
from logging_config import BackendError, BackendUnavailable, get_logger

logger = get_logger("audio")


def _load_vlc():
    """Import python-vlc, which fails when libvlc itself is not installed."""
    try:
        import vlc  # type: ignore[import-untyped]
    except (ImportError, OSError, NotImplementedError) as e:
        raise BackendUnavailable(f"VLC is not available: {e}") from e
    return vlc


class VlcBackend:
    """VLC-based player exposing play/pause/resume/stop commands"""

    def __init__(self, vlc_module=None, start_timeout=cv.PLAY_START_TIMEOUT):
        vlc = vlc_module if vlc_module is not None else _load_vlc()
        self._state = vlc.State
        self.start_timeout = start_timeout
        self._lock = threading.Lock()

        self.instance = vlc.Instance()
        if self.instance is None:
            raise BackendUnavailable("VLC instance could not be created")
        self.player = self.instance.media_player_new()
        self.current_path = None
        logger.info("VLC backend ready")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def play(self, path: str) -> None:
        """Start playing a local file

        Args:
            path: Absolute path of the file to play

        Raises:
            BackendError: If VLC refuses the media or reports an error while opening it
        """
        if not os.path.isfile(path):
            raise BackendError(f"Not a playable file: {path}")

        with self._lock:
            media = self.instance.media_new(path)
            self.player.set_media(media)
            if self.player.play() == -1:
                raise BackendError(f"VLC could not start {os.path.basename(path)}")
            self.current_path = path

        self._wait_for_start(path)
        logger.info(f"Started playback: {path}")

    def _wait_for_start(self, path: str) -> None:
        """Block until VLC leaves the opening states or the timeout passes"""
        opening = (self._state.NothingSpecial, self._state.Opening, self._state.Buffering)
        deadline = time.monotonic() + self.start_timeout
        state = self.player.get_state()
        while state in opening and time.monotonic() < deadline:
            time.sleep(0.05)
            state = self.player.get_state()

        if state == self._state.Error:
            raise BackendError(f"VLC failed to play {os.path.basename(path)}")

    def pause(self) -> None:
        with self._lock:
            self._require_media()
            self.player.set_pause(1)
        logger.info("Playback paused")

    def resume(self) -> None:
        with self._lock:
            self._require_media()
            self.player.set_pause(0)
        logger.info("Playback resumed")

    def stop(self) -> None:
        with self._lock:
            self.player.stop()
            self.current_path = None
        logger.info("Playback stopped")

    def close(self) -> None:
        """Release the player and the VLC instance"""
        if self.player is None:
            return
        try:
            self.stop()
        finally:
            self.player.release()
            self.instance.release()
            self.player = None
            self.instance = None
            logger.info("VLC backend released")

    def _require_media(self) -> None:
        if self.current_path is None:
            raise BackendError("Nothing is loaded")


def open_backend(start_timeout=cv.PLAY_START_TIMEOUT) -> VlcBackend:
    """Create the session's backend

    Raises:
        BackendUnavailable: If libvlc is missing or cannot be initialized
    """
    return VlcBackend(start_timeout=start_timeout)
