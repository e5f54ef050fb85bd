import socket
import typing

import psutil
import pytest

import cpuears.config
import cpuears.metrics


def test_cpu_source_primes_then_samples (monkeypatch: pytest.MonkeyPatch) -> None:

	"""The first psutil reading is discarded; samples are returned as floats."""

	readings = iter([0.0, 42, 87.5])
	calls: typing.List[typing.Any] = []

	def _cpu_percent (interval: typing.Any = None) -> float:
		calls.append(interval)
		return next(readings)

	monkeypatch.setattr(psutil, "cpu_percent", _cpu_percent)

	source = cpuears.metrics.CpuPercentSource()

	assert source.sample() == 42.0
	assert isinstance(source.sample(), float)
	assert calls == [None, None, None]


@pytest.mark.parametrize("machine", ["", ".", "localhost", "LOCALHOST", "127.0.0.1"])
def test_local_machine_names (machine: str) -> None:

	"""Empty and loopback names refer to this machine."""

	assert cpuears.metrics.is_local_machine(machine) is True


def test_own_hostname_is_local () -> None:

	"""This host's own name is local."""

	assert cpuears.metrics.is_local_machine(socket.gethostname()) is True


def test_remote_machine_is_rejected () -> None:

	"""Remote counters cannot be read."""

	settings = cpuears.config.Settings(machine="build-server-that-does-not-exist-42")

	with pytest.raises(cpuears.metrics.MetricSourceError):
		cpuears.metrics.open_metric_source(settings)


def test_open_local_source (monkeypatch: pytest.MonkeyPatch) -> None:

	"""The default settings open the local CPU counter."""

	monkeypatch.setattr(psutil, "cpu_percent", lambda interval=None: 12.5)

	source = cpuears.metrics.open_metric_source(cpuears.config.Settings())

	assert isinstance(source, cpuears.metrics.CpuPercentSource)
	assert source.sample() == 12.5
