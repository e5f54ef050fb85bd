"""Top-level wiring: sample the metric, pick a chord, play it.

``Monitor`` owns one of each component and runs the cycle::

	value = source.sample()
	display.update(value, ...)
	chord, octave = map_value(value)
	player.transition(chord, octave)

on the scheduler until ESC, Ctrl+C or SIGTERM.  Shutdown waits for the running
cycle, silences the last chord, then releases the MIDI port and session.
"""

import asyncio
import logging
import signal
import typing

import cpuears.chord_mapper
import cpuears.config
import cpuears.display
import cpuears.keystroke
import cpuears.metrics
import cpuears.player
import cpuears.resources
import cpuears.scheduler


logger = logging.getLogger(__name__)


class Monitor:

	"""
	Sonify a utilisation metric as a stream of major triads.

	Example:
		```python
		settings = cpuears.config.Settings()
		monitor = Monitor(settings)
		monitor.open()
		monitor.play()   # blocks until ESC / Ctrl+C
		```
	"""

	def __init__ (
		self,
		settings: cpuears.config.Settings,
		source: typing.Optional[cpuears.metrics.MetricSource] = None,
		output: typing.Optional[cpuears.player.MidiOutput] = None,
		display: typing.Optional[cpuears.display.ProgressDisplay] = None,
	) -> None:

		"""Store settings and any pre-built collaborators.

		Parameters:
			settings: Startup configuration.
			source: Metric source; opened from ``settings`` by :meth:`open` when omitted.
			output: MIDI output; the resource manager's port is used when omitted.
			display: Progress bar; a terminal ``ProgressDisplay`` when omitted.
		"""

		self.settings = settings
		self.resources = cpuears.resources.ResourceManager(settings)
		self.source = source
		self.display = display if display is not None else cpuears.display.ProgressDisplay()
		self.player: typing.Optional[cpuears.player.MidiChordPlayer] = None

		if output is not None:
			self.player = cpuears.player.MidiChordPlayer(output)

		self.scheduler = cpuears.scheduler.Scheduler(
			self.run_cycle,
			period = settings.period,
			initial_delay = settings.initial_delay,
		)

		self._stop_event: typing.Optional[asyncio.Event] = None
		self._loop: typing.Optional[asyncio.AbstractEventLoop] = None
		self._keystroke_listener: typing.Optional[cpuears.keystroke.KeystrokeListener] = None
		self._closed: bool = False

	def open (self) -> None:

		"""Acquire the session, open the counter and the MIDI output.

		Order follows what each step needs: the session first, since the
		counter is read under it, then the device.  On failure everything
		acquired so far is released and the error propagates; no cycle runs.

		Raises:
			cpuears.session.CredentialError: Session acquisition failed.
			cpuears.metrics.MetricSourceError: The counter cannot be opened.
			cpuears.midi_utils.StartupError: No usable MIDI output.
		"""

		try:
			self.resources.acquire_session()

			if self.source is None:
				self.source = cpuears.metrics.open_metric_source(self.settings)

			if self.player is None:
				self.resources.open_output()
				self.player = cpuears.player.MidiChordPlayer(cpuears.player.MidoOutput(self.resources.midi_out))

		except Exception:
			self.resources.release()
			raise

	def run_cycle (self) -> None:

		"""One sample → map → play step.  Send errors propagate to the scheduler."""

		if self.source is None or self.player is None:
			raise RuntimeError("Monitor.open() must be called before running cycles")

		value = self.source.sample()
		chord, octave = cpuears.chord_mapper.map_value(value)

		self.display.update(value, chord, octave)
		logger.debug(f"Sampled {value:.1f} -> {chord.name()} ({octave:+d})")

		self.player.transition(chord, octave)

	def request_stop (self) -> None:

		"""Ask a running :meth:`run` to shut down.  Safe from any thread."""

		if self._loop is None or self._stop_event is None:
			return

		self._loop.call_soon_threadsafe(self._stop_event.set)

	def _on_key (self, key: str) -> None:

		"""Keystroke callback: ESC requests shutdown."""

		if key == cpuears.keystroke.ESCAPE:
			self.request_stop()

	async def run (self, hotkeys: bool = True) -> None:

		"""Run cycles until a stop is requested, then shut down cleanly."""

		self._loop = asyncio.get_running_loop()
		self._stop_event = asyncio.Event()

		handled_signals: typing.List[int] = []

		for sig in (signal.SIGINT, signal.SIGTERM):
			try:
				self._loop.add_signal_handler(sig, self._stop_event.set)
				handled_signals.append(sig)
			except (NotImplementedError, RuntimeError):
				# Not available on this platform or outside the main thread.
				pass

		self.display.start()

		if hotkeys:
			self._keystroke_listener = cpuears.keystroke.KeystrokeListener(self._on_key)
			self._keystroke_listener.start()

			if self._keystroke_listener.active:
				logger.info("Press ESC to stop")

		await self.scheduler.start()

		try:
			await self._stop_event.wait()

		finally:
			try:
				await self.scheduler.stop()
				self.close()

			finally:
				if self._keystroke_listener is not None:
					self._keystroke_listener.stop()
					self._keystroke_listener = None

				self.display.stop()

				for sig in handled_signals:
					self._loop.remove_signal_handler(sig)

	def close (self) -> None:

		"""Silence the last chord and release the device and session.

		Only valid between cycles.  Safe to call more than once.  Resources
		are released even if the final note-offs fail.
		"""

		if self._closed:
			return

		self._closed = True

		try:
			if self.player is not None:
				self.player.stop_all()

		finally:
			self.resources.release()

	def play (self) -> None:

		"""
		Run until interrupted.  Blocks.
		"""

		try:
			asyncio.run(self.run())

		except KeyboardInterrupt:
			pass
