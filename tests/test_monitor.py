import asyncio
import typing

import psutil
import pytest

import cpuears.chords
import cpuears.config
import cpuears.keystroke
import cpuears.metrics
import cpuears.midi_utils
import cpuears.monitor
import cpuears.player


class _QuietDisplay:

	"""Progress display stand-in that records updates."""

	def __init__ (self) -> None:
		self.values: typing.List[float] = []

	def start (self) -> None:
		return None

	def stop (self) -> None:
		return None

	def update (self, value: float, chord: typing.Any = None, octave: int = 0) -> None:
		self.values.append(value)


def _make_monitor (source: typing.Any, output: typing.Any, **settings: typing.Any) -> cpuears.monitor.Monitor:

	return cpuears.monitor.Monitor(
		cpuears.config.Settings(**settings),
		source = source,
		output = output,
		display = _QuietDisplay(),  # type: ignore[arg-type]
	)


def test_cycles_follow_the_metric (make_source: typing.Callable[..., typing.Any], recording_output: typing.Any) -> None:

	"""Three cycles over 5, 15, 95 should play C-2, D-1 then E+2."""

	monitor = _make_monitor(make_source([5, 15, 95]), recording_output)

	for _ in range(3):
		monitor.run_cycle()

	assert monitor.display.values == [5, 15, 95]
	assert [kind for kind, _, _ in recording_output.events] == ["on"] * 3 + (["off"] * 3 + ["on"] * 3) * 2
	assert [p for kind, p, _ in recording_output.events if kind == "on"][-3:] == [88, 92, 95]
	assert monitor.player.state.active_chord == cpuears.chords.E_MAJOR
	assert monitor.player.state.active_offset == 2


def test_cycle_before_open_is_an_error () -> None:

	"""Running a cycle with no source or player is a programming error."""

	monitor = cpuears.monitor.Monitor(cpuears.config.Settings(), display=_QuietDisplay())  # type: ignore[arg-type]

	with pytest.raises(RuntimeError):
		monitor.run_cycle()


def test_close_silences_and_releases (make_source: typing.Callable[..., typing.Any], recording_output: typing.Any) -> None:

	"""close() sends note-offs for the last chord once and releases resources."""

	monitor = _make_monitor(make_source([45]), recording_output)
	monitor.run_cycle()

	monitor.close()
	monitor.close()

	assert recording_output.events[-3:] == [("off", 67, 0), ("off", 71, 0), ("off", 74, 0)]
	assert len(recording_output.events) == 6
	assert monitor.player.state.is_sounding is False


def test_open_uses_first_midi_device (patch_midi: None, monkeypatch: pytest.MonkeyPatch) -> None:

	"""open() builds a player on the first enumerated MIDI output."""

	monkeypatch.setattr(psutil, "cpu_percent", lambda interval=None: 33.0)

	monitor = cpuears.monitor.Monitor(cpuears.config.Settings(), display=_QuietDisplay())  # type: ignore[arg-type]
	monitor.open()

	assert monitor.resources.device_name == "Dummy MIDI"
	assert isinstance(monitor.player.output, cpuears.player.MidoOutput)

	monitor.run_cycle()
	port = monitor.resources.midi_out

	assert [m.type for m in port.messages] == ["note_on"] * 3
	assert [m.note for m in port.messages] == [65, 69, 72]

	monitor.close()

	assert port.closed is True
	assert [m.type for m in port.messages][-3:] == ["note_off"] * 3


def test_open_without_devices_fails_before_any_cycle (no_midi: None, monkeypatch: pytest.MonkeyPatch) -> None:

	"""With no MIDI outputs open() raises and no player exists."""

	monkeypatch.setattr(psutil, "cpu_percent", lambda interval=None: 0.0)

	monitor = cpuears.monitor.Monitor(cpuears.config.Settings(), display=_QuietDisplay())  # type: ignore[arg-type]

	with pytest.raises(cpuears.midi_utils.StartupError):
		monitor.open()

	assert monitor.player is None


def test_open_with_remote_machine_fails (patch_midi: None) -> None:

	"""A remote machine cannot be sampled, so startup stops before the device is opened."""

	settings = cpuears.config.Settings(machine="build-server-that-does-not-exist-42")
	monitor = cpuears.monitor.Monitor(settings, display=_QuietDisplay())  # type: ignore[arg-type]

	with pytest.raises(cpuears.metrics.MetricSourceError):
		monitor.open()

	assert monitor.resources.midi_out is None


def test_escape_key_requests_stop () -> None:

	"""Only a lone ESC triggers a shutdown request; arrow keys do not."""

	monitor = cpuears.monitor.Monitor(cpuears.config.Settings(), display=_QuietDisplay())  # type: ignore[arg-type]
	requests: typing.List[bool] = []
	monitor.request_stop = lambda: requests.append(True)  # type: ignore[method-assign]

	monitor._on_key("q")
	monitor._on_key("\x1b[A")
	monitor._on_key(cpuears.keystroke.ESCAPE)

	assert requests == [True]


@pytest.mark.asyncio
async def test_run_until_stop_requested (make_source: typing.Callable[..., typing.Any], recording_output: typing.Any) -> None:

	"""run() plays cycles until asked to stop, then silences the last chord."""

	monitor = _make_monitor(make_source([5, 15, 95]), recording_output, period=0.02, initial_delay=0.0)

	async def _stop_later () -> None:
		await asyncio.sleep(0.15)
		monitor.request_stop()

	stopper = asyncio.create_task(_stop_later())
	await monitor.run(hotkeys=False)
	await stopper

	ons = [e for e in recording_output.events if e[0] == "on"]
	offs = [e for e in recording_output.events if e[0] == "off"]

	assert monitor.scheduler.cycles_run >= 2
	assert len(ons) == len(offs)
	assert monitor.player.state.is_sounding is False
	assert monitor.scheduler.running is False
