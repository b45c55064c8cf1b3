"""Tests for session module - key dispatch and the scheduled loop"""

import os
import unittest
from unittest.mock import MagicMock, patch

import constants as cv
import session
from app_state import ApplicationState
from fakes import FakeBackend, FakeClock, FakeTerminal, ImmediateExecutor
from logging_config import BackendUnavailable
from reader import PlayerSettings
from scheduler import ScheduledTaskRunner
from session import SessionController, SessionStatus

ROOT = os.path.join(os.sep, "music")


class TestSessionController(unittest.TestCase):
    """Base test class wiring a controller to fakes"""

    def setUp(self):
        self.clock = FakeClock()
        self.backend = FakeBackend()
        self.scans = 0
        self.settings = PlayerSettings(library=ROOT)
        self.state = ApplicationState(
            ROOT,
            backend=self.backend,
            executor=ImmediateExecutor(),
            lister=self._list,
        )

    def _list(self, path):
        self.scans += 1
        return ["a.mp3", "b.mp3", "c.mp3"]

    def make_controller(self, script):
        self.terminal = FakeTerminal(script, clock=self.clock)
        runner = ScheduledTaskRunner.for_session(self.settings, clock=self.clock, now=0.0)
        return SessionController(
            self.state,
            self.terminal,
            runner,
            tick_rate=self.settings.tick_rate,
            clock=self.clock,
        )


class TestKeyDispatch(TestSessionController):
    def setUp(self):
        super().setUp()
        self.state.rescan()
        self.controller = self.make_controller([])

    def test_quit(self):
        self.controller.handle_key("q")

        self.assertIs(self.controller.status, SessionStatus.QUITTING)

    def test_arrows_move_cursor(self):
        """Test that Down moves forward and Up moves backward"""
        self.controller.handle_key(cv.KEY_DOWN)
        self.assertEqual(self.state.library.selected(), "b.mp3")

        self.controller.handle_key(cv.KEY_UP)
        self.controller.handle_key(cv.KEY_UP)
        self.assertEqual(self.state.library.selected(), "c.mp3")

    def test_enter_plays(self):
        self.controller.handle_key(cv.KEY_ENTER)

        self.assertEqual(self.backend.played, [os.path.join(ROOT, "a.mp3")])

    def test_pause_and_resume_keys(self):
        self.controller.handle_key("p")
        self.assertTrue(self.state.is_paused)

        self.controller.handle_key("o")
        self.assertFalse(self.state.is_paused)

    def test_unknown_key_is_ignored(self):
        """Test that unbound keys leave the state alone"""
        for key in ("x", cv.KEY_LEFT, cv.KEY_ESCAPE, "Q", "\x1b[5~", "\x1bq", "\x1bp"):
            self.controller.handle_key(key)

        self.assertIs(self.controller.status, SessionStatus.RUNNING)
        self.assertEqual(self.state.library.cursor, 0)
        self.assertEqual(self.backend.commands, [])


class TestLoop(TestSessionController):
    def test_setup_then_rescan(self):
        """Test that setup fires after one tick and rescan after two"""
        controller = self.make_controller([None, None])

        controller.step()
        self.assertEqual(self.state.library.items, (cv.PLACEHOLDER_ENTRY,))
        self.assertEqual(self.state.library.cursor, 0)
        self.assertEqual(self.scans, 0)

        controller.step()
        self.assertEqual(self.state.library.items, ("a.mp3", "b.mp3", "c.mp3"))
        self.assertEqual(self.state.library.cursor, 0)
        self.assertEqual(self.scans, 1)

    def test_rescan_stays_dormant(self):
        controller = self.make_controller([None] * 3)
        for _ in range(3):
            controller.step()

        self.clock.advance(cv.DORMANT_INTERVAL / 2)
        controller.run_scheduled()

        self.assertEqual(self.scans, 1)

    def test_periodic_rescan(self):
        self.settings.rescan_interval = 5.0
        controller = self.make_controller([None, None])
        controller.step()
        controller.step()

        self.clock.advance(5.0)
        controller.run_scheduled()

        self.assertEqual(self.scans, 2)

    def test_poll_timeout_capped_at_tick(self):
        """Test that the input wait never exceeds one tick"""
        controller = self.make_controller([None, None, None])
        for _ in range(3):
            controller.step()

        self.assertEqual(self.terminal.timeouts[0], 0.25)
        self.assertEqual(self.terminal.timeouts[1], 0.25)
        self.assertEqual(self.terminal.timeouts[2], 0.25)

    def test_poll_timeout_until_next_task(self):
        controller = self.make_controller([])
        self.clock.advance(0.2)

        self.assertAlmostEqual(controller._poll_timeout(), 0.05)

    def test_full_session(self):
        """Test browsing, playing and quitting through scripted keys"""
        controller = self.make_controller(
            [None, None, cv.KEY_DOWN, cv.KEY_ENTER, "q"]
        )

        controller.run()

        self.assertIs(controller.status, SessionStatus.QUITTING)
        self.assertEqual(self.state.now_playing, "b.mp3")
        self.assertEqual(self.backend.played, [os.path.join(ROOT, "b.mp3")])
        self.assertEqual(self.backend.commands[-1], "stop")

    def test_every_step_renders(self):
        controller = self.make_controller([None, None, None])
        for _ in range(3):
            controller.step()

        self.assertTrue(self.terminal.frames)
        self.assertIn("Songs", self.terminal.frames[-1])
        self.assertIn("a.mp3", self.terminal.frames[-1])

    def test_closed_input_ends_session(self):
        controller = self.make_controller([])

        controller.run()

        self.assertIs(controller.status, SessionStatus.QUITTING)
        self.assertEqual(self.backend.commands, ["stop"])


class TestRunSession(unittest.TestCase):
    """Tests for wiring the backend, executor and terminal"""

    def setUp(self):
        self.settings = PlayerSettings(library=os.path.join(os.sep, "no", "such", "dir"))

    def test_backend_is_released(self):
        backend = MagicMock()
        terminal = FakeTerminal(["q"])
        with patch("session.audio_backend.open_backend", return_value=backend), patch(
            "session.Terminal", return_value=terminal
        ):
            session.run_session(self.settings)

        self.assertTrue(terminal.entered)
        self.assertTrue(terminal.exited)
        backend.stop.assert_called_once()
        backend.close.assert_called_once()

    def test_degraded_without_backend(self):
        """Test that a missing backend is reported instead of aborting"""
        terminal = FakeTerminal(["q"])
        with patch(
            "session.audio_backend.open_backend",
            side_effect=BackendUnavailable("VLC is not available"),
        ), patch("session.Terminal", return_value=terminal):
            session.run_session(self.settings)

        self.assertIn("Playback unavailable", terminal.frames[0])
        self.assertIn("VLC is not available", terminal.frames[0])

    def test_backend_released_when_session_fails(self):
        backend = MagicMock()
        terminal = FakeTerminal()
        terminal.poll_key = MagicMock(side_effect=RuntimeError("broken"))
        with patch("session.audio_backend.open_backend", return_value=backend), patch(
            "session.Terminal", return_value=terminal
        ):
            with self.assertRaises(RuntimeError):
                session.run_session(self.settings)

        self.assertTrue(terminal.exited)
        backend.close.assert_called_once()


if __name__ == "__main__":
    unittest.main()
