"""Periodic driver for the sample → map → play cycle.

The scheduler fires on a fixed grid anchored at start: the first tick after
``initial_delay`` seconds, then every ``period`` seconds.  Targets are computed
from the start time rather than from the previous wake-up, so sleep overshoot
never accumulates into drift.

Each cycle is a blocking function (it talks to the MIDI device), so it runs in
the default executor while the event loop keeps time.  Cycles never overlap:
a tick that arrives while the previous cycle is still running is dropped, not
queued, and the next tick simply samples whatever the metric is by then.  The
busy flag is only touched from the event loop thread, so no lock is needed.
"""

import asyncio
import logging
import time
import typing

import cpuears.constants.timing


logger = logging.getLogger(__name__)


CycleFn = typing.Callable[[], None]


class Scheduler:

	"""
	Run a cycle function periodically, skipping ticks that would overlap.
	"""

	def __init__ (
		self,
		cycle: CycleFn,
		period: float = cpuears.constants.timing.CYCLE_PERIOD,
		initial_delay: float = cpuears.constants.timing.INITIAL_DELAY,
	) -> None:

		"""Store the cycle and timing.  Nothing runs until :meth:`start`.

		Parameters:
			cycle: Zero-argument blocking function run once per tick.
			period: Seconds between ticks.
			initial_delay: Seconds before the first tick.
		"""

		if period <= 0:
			raise ValueError(f"period must be positive, got {period}")

		if initial_delay < 0:
			raise ValueError(f"initial_delay must not be negative, got {initial_delay}")

		self.cycle = cycle
		self.period = period
		self.initial_delay = initial_delay

		self.running: bool = False
		self.task: typing.Optional[asyncio.Task] = None
		self._in_flight: typing.Optional[asyncio.Future] = None

		self.ticks: int = 0
		self.cycles_run: int = 0
		self.ticks_skipped: int = 0
		self.cycles_failed: int = 0

	@property
	def busy (self) -> bool:

		"""True while a cycle is executing."""

		return self._in_flight is not None and not self._in_flight.done()

	async def start (self) -> None:

		"""Start ticking in a background task.  A second call is a no-op."""

		if self.running:
			return

		self.running = True
		self.task = asyncio.create_task(self._run_loop())

		logger.info(f"Scheduler started (every {self.period * 1000:.0f} ms after {self.initial_delay * 1000:.0f} ms)")

	async def stop (self) -> None:

		"""Stop ticking and wait for any in-flight cycle to finish.

		Shutdown therefore lands between cycles, never inside one.
		"""

		if not self.running:
			return

		self.running = False

		if self.task is not None:
			self.task.cancel()

			try:
				await self.task
			except asyncio.CancelledError:
				pass

			self.task = None

		if self._in_flight is not None:
			await asyncio.wait([self._in_flight])
			self._in_flight = None

		logger.info(f"Scheduler stopped ({self.cycles_run} cycles, {self.ticks_skipped} skipped, {self.cycles_failed} failed)")

	async def _run_loop (self) -> None:

		"""Sleep to each grid target and fire a tick.

		If the loop wakes more than a period late, the missed grid points are
		dropped rather than fired back to back.
		"""

		start_time = time.perf_counter()
		next_index = 0

		while self.running:

			target = start_time + self.initial_delay + next_index * self.period
			delay = target - time.perf_counter()

			if delay > 0:
				await asyncio.sleep(delay)

			self.ticks += 1
			self.fire()

			elapsed = time.perf_counter() - start_time - self.initial_delay
			next_index = max(next_index + 1, int(elapsed // self.period) + 1)

	def fire (self) -> bool:

		"""Launch one cycle unless the previous one is still running.

		Must be called from the event loop thread.

		Returns:
			True if a cycle was launched, False if the tick was skipped.
		"""

		if self.busy:
			self.ticks_skipped += 1
			logger.debug("Previous cycle still running - tick skipped")
			return False

		loop = asyncio.get_running_loop()
		self._in_flight = loop.run_in_executor(None, self.cycle)
		self._in_flight.add_done_callback(self._on_cycle_done)

		return True

	def _on_cycle_done (self, future: asyncio.Future) -> None:

		"""Count the outcome and report a failed cycle.  Failures are not retried."""

		if future.cancelled():
			return

		exc = future.exception()

		if exc is None:
			self.cycles_run += 1
			return

		self.cycles_failed += 1
		logger.error("Cycle failed", exc_info=(type(exc), exc, exc.__traceback__))
