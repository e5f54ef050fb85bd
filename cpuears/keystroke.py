"""Single-keystroke shutdown listener.

A background thread reads keys from stdin in cbreak mode and hands each one
to a callback, so the user can stop the monitor with one press of ESC.  The
progress display writes to **stderr** while this module reads **stdin**, so
the two do not collide.

**Platform support:** POSIX only (needs :mod:`tty` and :mod:`termios`) with a
real TTY on stdin.  Elsewhere the listener logs a warning and stays inactive;
Ctrl+C still works.
"""

import logging
import os
import select
import sys
import threading
import typing


logger = logging.getLogger(__name__)


ESCAPE = "\x1b"

#: Seconds to wait after a lone ESC for the rest of an escape sequence.
ESCAPE_SEQUENCE_TIMEOUT = 0.03

#: ``True`` when stdin can deliver single keystrokes.
KEYSTROKES_SUPPORTED: bool = False

#: Why keystrokes are unavailable, or ``None`` when they are supported.
KEYSTROKES_UNAVAILABLE_REASON: typing.Optional[str] = None

try:
	import termios
	import tty

	if not sys.stdin.isatty():
		raise OSError("stdin is not a TTY")

	_fd = sys.stdin.fileno()
	termios.tcsetattr(_fd, termios.TCSADRAIN, termios.tcgetattr(_fd))

	KEYSTROKES_SUPPORTED = True

except ImportError:
	KEYSTROKES_UNAVAILABLE_REASON = "The 'tty' and 'termios' modules are not available on this platform."
except (OSError, ValueError) as _e:
	KEYSTROKES_UNAVAILABLE_REASON = f"Keystroke input needs an interactive terminal: {_e}"
except Exception as _e:
	# termios.error is not an OSError.
	KEYSTROKES_UNAVAILABLE_REASON = f"Keystrokes unavailable: {_e}"


def read_key (fd: int) -> str:

	"""Read one keypress from ``fd``.

	Arrow and function keys arrive as multi-byte sequences starting with ESC;
	they come back whole, so only a lone ESC equals :data:`ESCAPE`.
	"""

	data = os.read(fd, 32)

	if data == ESCAPE.encode():
		ready, _, _ = select.select([fd], [], [], ESCAPE_SEQUENCE_TIMEOUT)
		if ready:
			data += os.read(fd, 32)

	return data.decode(errors="replace")


class KeystrokeListener:

	"""Daemon thread that passes every keypress to ``on_key``.

	``on_key`` runs on the listener thread; use
	``loop.call_soon_threadsafe`` inside it to reach an event loop.

	Example::

		listener = KeystrokeListener(lambda key: key == ESCAPE and stop())
		listener.start()
		...
		listener.stop()
	"""

	def __init__ (self, on_key: typing.Callable[[str], typing.Any]) -> None:

		self.on_key = on_key
		self._thread: typing.Optional[threading.Thread] = None
		self._running: bool = False

		#: ``True`` after a successful :meth:`start` on a supported platform.
		self.active: bool = False

	def start (self) -> None:

		"""Start reading keys.  A no-op when already running or unsupported."""

		if self._running:
			return

		if not KEYSTROKES_SUPPORTED:
			logger.warning(f"Keypress shutdown is disabled, use Ctrl+C instead. {KEYSTROKES_UNAVAILABLE_REASON}")
			return

		self._running = True
		self.active = True
		self._thread = threading.Thread(
			target = self._listen,
			name   = "cpuears-keystroke-listener",
			daemon = True,
		)
		self._thread.start()

	def stop (self) -> None:

		"""Ask the thread to exit; it restores the terminal within ~0.1 s."""

		self._running = False
		self.active = False

	def _listen (self) -> None:

		"""Thread target: poll stdin until stopped, always restoring the terminal."""

		import termios  # noqa: PLC0415
		import tty      # noqa: PLC0415

		fd = sys.stdin.fileno()
		old_settings = termios.tcgetattr(fd)

		try:
			# cbreak keeps Ctrl+C working, unlike raw mode.
			tty.setcbreak(fd)

			while self._running:
				ready, _, _ = select.select([fd], [], [], 0.1)
				if ready:
					key = read_key(fd)
					if key:
						self.on_key(key)

		except Exception:
			logger.exception("Keystroke listener stopped unexpectedly")

		finally:
			termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)
			self.active = False
