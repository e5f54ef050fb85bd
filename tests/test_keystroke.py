import os
import sys
import unittest.mock

import pytest

import cpuears.keystroke as keystroke_mod
from cpuears.keystroke import KeystrokeListener


class TestKeystrokeListenerPlatform:

	def test_supported_flag_is_bool (self):
		assert isinstance(keystroke_mod.KEYSTROKES_SUPPORTED, bool)

	def test_reason_matches_support (self):
		if keystroke_mod.KEYSTROKES_SUPPORTED:
			assert keystroke_mod.KEYSTROKES_UNAVAILABLE_REASON is None
		else:
			assert keystroke_mod.KEYSTROKES_UNAVAILABLE_REASON

	def test_start_on_unsupported_platform_logs_warning_and_does_not_raise (self, caplog):
		listener = KeystrokeListener(lambda key: None)
		with unittest.mock.patch.object(keystroke_mod, "KEYSTROKES_SUPPORTED", False):
			with unittest.mock.patch.object(keystroke_mod, "KEYSTROKES_UNAVAILABLE_REASON", "Test: no tty"):
				listener.start()

		assert listener.active is False
		assert listener._thread is None
		assert "Ctrl+C" in caplog.text

	def test_stop_safe_when_never_started (self):
		listener = KeystrokeListener(lambda key: None)
		listener.stop()
		assert listener.active is False

	def test_escape_constant (self):
		assert keystroke_mod.ESCAPE == "\x1b"


@pytest.fixture
def key_pipe ():
	if sys.platform == "win32":
		pytest.skip("select() on pipes needs POSIX")
	read_fd, write_fd = os.pipe()
	yield read_fd, write_fd
	os.close(read_fd)
	os.close(write_fd)


class TestReadKey:

	def test_lone_escape (self, key_pipe):
		read_fd, write_fd = key_pipe
		os.write(write_fd, b"\x1b")
		assert keystroke_mod.read_key(read_fd) == keystroke_mod.ESCAPE

	def test_arrow_key_is_not_escape (self, key_pipe):
		read_fd, write_fd = key_pipe
		os.write(write_fd, b"\x1b[A")
		key = keystroke_mod.read_key(read_fd)
		assert key == "\x1b[A"
		assert key != keystroke_mod.ESCAPE

	def test_plain_key (self, key_pipe):
		read_fd, write_fd = key_pipe
		os.write(write_fd, b"q")
		assert keystroke_mod.read_key(read_fd) == "q"
