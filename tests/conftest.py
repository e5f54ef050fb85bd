import typing

import mido
import pytest


class FakeMidiOut:

	"""MIDI output stub that records every message sent."""

	def __init__ (self) -> None:

		self.messages: typing.List[mido.Message] = []
		self.closed: bool = False

	def send (self, message: mido.Message) -> None:

		"""Record the outgoing MIDI message."""

		self.messages.append(message)

	def close (self) -> None:

		"""Mark the fake device closed."""

		self.closed = True


class RecordingOutput:

	"""``MidiOutput`` fake that records ``(kind, pitch, velocity)`` tuples in order.

	Set ``fail_after`` to make the N+1th send raise ``OSError``.
	"""

	def __init__ (self, fail_after: typing.Optional[int] = None) -> None:

		self.events: typing.List[typing.Tuple[str, int, int]] = []
		self.fail_after = fail_after

	def _record (self, kind: str, pitch: int, velocity: int) -> None:

		if self.fail_after is not None and len(self.events) >= self.fail_after:
			raise OSError("device disconnected")

		self.events.append((kind, pitch, velocity))

	def send_note_on (self, pitch: int, velocity: int) -> None:

		self._record("on", pitch, velocity)

	def send_note_off (self, pitch: int, velocity: int) -> None:

		self._record("off", pitch, velocity)


def _fake_get_output_names () -> list[str]:

	"""Return a fixed list of MIDI output names for tests."""

	return ["Dummy MIDI", "Second MIDI"]


def _fake_open_output (name: str) -> FakeMidiOut:

	"""Return a fake MIDI output regardless of the name."""

	return FakeMidiOut()


@pytest.fixture
def patch_midi (monkeypatch: pytest.MonkeyPatch) -> None:

	"""Patch mido to use fake MIDI outputs."""

	monkeypatch.setattr(mido, "get_output_names", _fake_get_output_names)
	monkeypatch.setattr(mido, "open_output", _fake_open_output)


@pytest.fixture
def no_midi (monkeypatch: pytest.MonkeyPatch) -> None:

	"""Patch mido so that no output devices are present."""

	monkeypatch.setattr(mido, "get_output_names", lambda: [])


@pytest.fixture
def recording_output () -> RecordingOutput:

	"""A fresh recording ``MidiOutput``."""

	return RecordingOutput()


class ListSource:

	"""Metric source that replays a fixed list of values."""

	def __init__ (self, values: typing.Iterable[float]) -> None:

		self._values = list(values)
		self.calls: int = 0

	def sample (self) -> float:

		value = self._values[self.calls % len(self._values)]
		self.calls += 1
		return value


@pytest.fixture
def make_source () -> typing.Callable[..., ListSource]:

	"""Factory for replaying metric sources."""

	return ListSource


@pytest.fixture
def make_output () -> typing.Callable[..., RecordingOutput]:

	"""Factory for recording outputs, optionally failing after N sends."""

	return RecordingOutput
