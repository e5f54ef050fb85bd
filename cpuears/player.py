"""Chord playback state machine.

``MidiChordPlayer`` keeps exactly one triad sounding at a time.  It has two
states: idle (nothing sounding) and sounding a chord at an octave offset.
Each :meth:`MidiChordPlayer.transition` silences the previous chord before
starting the next, so a steady-state cycle sends three note-offs followed by
three note-ons, and the first cycle sends only the three note-ons.

Device I/O goes through the small :class:`MidiOutput` interface so the player
can be exercised against a fake that records message order.
"""

import dataclasses
import logging
import typing

import mido

import cpuears.chords
import cpuears.constants.midi


logger = logging.getLogger(__name__)


class MidiOutput (typing.Protocol):

	"""The two device operations the player needs."""

	def send_note_on (self, pitch: int, velocity: int) -> None:
		...

	def send_note_off (self, pitch: int, velocity: int) -> None:
		...


class MidoOutput:

	"""Send chord notes to a mido output port on the chord channel.

	The port is borrowed, not owned: closing it is the job of
	:class:`cpuears.resources.ResourceManager`.
	"""

	def __init__ (self, port: typing.Any, channel: int = cpuears.constants.midi.CHORD_CHANNEL) -> None:

		self.port = port
		self.channel = channel

	def send_note_on (self, pitch: int, velocity: int) -> None:

		self.port.send(mido.Message('note_on', channel=self.channel, note=pitch, velocity=velocity))

	def send_note_off (self, pitch: int, velocity: int) -> None:

		self.port.send(mido.Message('note_off', channel=self.channel, note=pitch, velocity=velocity))


@dataclasses.dataclass
class PlaybackState:

	"""The chord currently sounding, if any, and its octave offset.

	``stray_pitches`` holds note-ons from a chord that failed to start fully;
	they are silenced with the next stop.
	"""

	active_chord: typing.Optional[cpuears.chords.Chord] = None
	active_offset: int = 0
	stray_pitches: typing.List[int] = dataclasses.field(default_factory=list)

	@property
	def is_sounding (self) -> bool:

		return self.active_chord is not None

	def pitches_on (self) -> typing.List[int]:

		"""Every pitch a note-off is owed for."""

		pitches = list(self.stray_pitches)

		if self.active_chord is not None:
			pitches.extend(self.active_chord.pitches(self.active_offset))

		return pitches


class MidiChordPlayer:

	"""
	Sounds one chord at a time on a MIDI output.
	"""

	def __init__ (self, output: MidiOutput) -> None:

		"""Start idle.

		Parameters:
			output: Device to send to.  Lent by the resource manager for the
				lifetime of the player.
		"""

		self.output = output
		self.state = PlaybackState()

	def transition (self, chord: cpuears.chords.Chord, octave_offset: int) -> None:

		"""Silence the current chord (if any) and start ``chord`` at ``octave_offset``.

		Send errors propagate.  The state only becomes the new chord once all
		three note-ons have been sent: a failure while silencing leaves the old
		chord recorded (so a later stop retries it), and a failure while
		starting leaves the player idle with the notes already started kept
		as strays, silenced by the next transition or stop.
		"""

		self._silence_current()

		started: typing.List[int] = []

		try:
			for pitch in chord.pitches(octave_offset):
				self.output.send_note_on(pitch, cpuears.constants.midi.NOTE_ON_VELOCITY)
				started.append(pitch)

		except Exception:
			self.state.stray_pitches.extend(started)
			raise

		self.state.active_chord = chord
		self.state.active_offset = octave_offset

		logger.debug(f"Sounding {chord.name()} ({octave_offset:+d})")

	def stop_all (self) -> None:

		"""Silence the current chord and go idle.  A no-op when nothing is on."""

		if not self.state.pitches_on():
			return

		self._silence_current()

		logger.info("All chord notes off")

	def _silence_current (self) -> None:

		"""Send note-off for every pitch still on, then mark idle."""

		pitches = self.state.pitches_on()

		if not pitches:
			return

		for pitch in pitches:
			self.output.send_note_off(pitch, cpuears.constants.midi.NOTE_OFF_VELOCITY)

		self.state.active_chord = None
		self.state.active_offset = 0
		self.state.stray_pitches.clear()
