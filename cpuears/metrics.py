"""Utilisation metric sources.

A metric source exposes a single ``sample()`` call returning the current value
of a system-wide counter as a float, nominally a percentage in ``[0, 100]``.
The core calls it once per cycle and never caches the result.
"""

import logging
import socket
import typing

import psutil

import cpuears.config


logger = logging.getLogger(__name__)


_LOCAL_MACHINE_NAMES = {"", ".", "localhost", "127.0.0.1"}


class MetricSourceError (Exception):

	"""Raised when the requested counter cannot be opened."""


class MetricSource (typing.Protocol):

	def sample (self) -> float:
		...


class CpuPercentSource:

	"""Total CPU utilisation across all cores, via ``psutil``.

	``psutil.cpu_percent(interval=None)`` reports usage since the previous
	call and returns a meaningless ``0.0`` the first time, so the counter is
	primed on construction.
	"""

	def __init__ (self) -> None:

		psutil.cpu_percent(interval=None)

	def sample (self) -> float:

		"""Return CPU utilisation since the last sample, as a percentage."""

		return float(psutil.cpu_percent(interval=None))


def is_local_machine (machine: str) -> bool:

	"""Return True when ``machine`` names this host."""

	name = machine.strip().lower()

	if name in _LOCAL_MACHINE_NAMES:
		return True

	return name in {socket.gethostname().lower(), socket.getfqdn().lower()}


def open_metric_source (settings: cpuears.config.Settings) -> MetricSource:

	"""Open the CPU counter selected by ``settings.machine``.

	Raises:
		MetricSourceError: If the machine is not this host.  ``psutil`` only
			reads the local kernel counters.
	"""

	if not is_local_machine(settings.machine):
		raise MetricSourceError(
			f"Cannot read CPU counters on {settings.machine!r}: only the local machine is supported."
		)

	logger.info("Connecting to CPU utilisation counter...")

	return CpuPercentSource()
