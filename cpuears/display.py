"""Terminal progress bar for the sampled metric.

Shows a persistent status line on stderr with the raw value of the last sample
and the chord it selected::

	CPU [##########--------------------]  33.1%  Chord: F

The bar is purely observational.  It receives the value once per cycle and
feeds nothing back.  Log messages scroll above it without disruption.
"""

import logging
import math
import shutil
import sys
import threading
import typing

import cpuears.chords


_BAR_WIDTH = 30
_MIN_TERMINAL_WIDTH = 40


def format_progress (value: float, chord: typing.Optional[cpuears.chords.Chord] = None, octave: int = 0, width: int = _BAR_WIDTH) -> str:

	"""Render the status line for one sample.

	The bar is clamped to 0-100 for drawing; the numeric value is shown as
	sampled.

	Example:
		```python
		format_progress(50.0, width=10)   # → "CPU [#####-----]  50.0%"
		```
	"""

	fraction = value / 100.0 if math.isfinite(value) else 0.0
	filled = int(round(max(0.0, min(1.0, fraction)) * width))
	bar = "#" * filled + "-" * (width - filled)

	line = f"CPU [{bar}] {value:5.1f}%"

	if chord is not None:
		line += f"  Chord: {chord.name()}"
		if octave:
			line += f" ({octave:+d})"

	return line


class DisplayLogHandler (logging.Handler):

	"""Logging handler that clears and redraws the status line around log output.

	Installed by ``ProgressDisplay.start()`` and removed by ``ProgressDisplay.stop()``.
	"""

	def __init__ (self, display: "ProgressDisplay") -> None:

		super().__init__()
		self._display = display

	def emit (self, record: logging.LogRecord) -> None:

		"""Clear the status line, write the log message, then redraw."""

		try:
			msg = self.format(record)

			with self._display.lock:
				self._display.clear_line()
				sys.stderr.write(msg + "\n")
				sys.stderr.flush()
				self._display.draw()

		except Exception:
			self.handleError(record)


class ProgressDisplay:

	"""Live status line showing the latest sample.

	``update()`` is called from the cycle thread while log records may arrive
	from any thread, so all terminal writes go through :attr:`lock`.

	Example:
		```python
		display = ProgressDisplay()
		display.start()
		display.update(42.0, G_MAJOR, 0)
		display.stop()
		```
	"""

	def __init__ (self) -> None:

		self.lock = threading.RLock()
		self._active: bool = False
		self._handler: typing.Optional[DisplayLogHandler] = None
		self._saved_handlers: typing.List[logging.Handler] = []
		self._last_line: str = ""

	def start (self) -> None:

		"""Install the log handler and activate the display.

		Saves existing root logger handlers and replaces them with a
		``DisplayLogHandler``.  Original handlers are restored by ``stop()``.
		"""

		if self._active:
			return

		self._active = True

		root_logger = logging.getLogger()
		self._saved_handlers = list(root_logger.handlers)

		self._handler = DisplayLogHandler(self)

		if self._saved_handlers and self._saved_handlers[0].formatter:
			self._handler.setFormatter(self._saved_handlers[0].formatter)
		else:
			self._handler.setFormatter(logging.Formatter("%(levelname)s:%(name)s:%(message)s"))

		root_logger.handlers.clear()
		root_logger.addHandler(self._handler)

	def stop (self) -> None:

		"""Clear the status line and restore original log handlers."""

		if not self._active:
			return

		with self.lock:
			self.clear_line()
			self._active = False

		root_logger = logging.getLogger()
		root_logger.handlers.clear()

		for handler in self._saved_handlers:
			root_logger.addHandler(handler)

		self._saved_handlers = []
		self._handler = None

	def update (self, value: float, chord: typing.Optional[cpuears.chords.Chord] = None, octave: int = 0) -> None:

		"""Redraw the bar for a new sample."""

		if not self._active:
			return

		width = _BAR_WIDTH
		term_width = shutil.get_terminal_size(fallback=(80, 24)).columns

		if term_width < _MIN_TERMINAL_WIDTH:
			width = 10

		with self.lock:
			self._last_line = format_progress(value, chord, octave, width)
			self.draw()

	def draw (self) -> None:

		"""Write the current status line to the terminal."""

		if not self._active or not self._last_line:
			return

		# No trailing newline - the cursor stays on the status line.
		sys.stderr.write(f"\r\033[K{self._last_line}")
		sys.stderr.flush()

	def clear_line (self) -> None:

		"""Erase the status line."""

		if not self._active:
			return

		sys.stderr.write("\r\033[K")
		sys.stderr.flush()
