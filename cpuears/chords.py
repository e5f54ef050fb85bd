"""Major triad definitions.

This module provides the `Chord` class and the seven major triads that the
chord mapper chooses from.

Module-level constants:
- `PC_TO_NOTE_NAME`: Maps pitch classes (0-11) to note names
- `MAJOR_TRIAD_INTERVALS`: Semitones from the root for root, third and fifth
- `C_MAJOR` ... `B_MAJOR`: The predefined triads, rooted in the octave of Middle C
"""

import dataclasses
import typing

import cpuears.constants.pitches as pitches


PC_TO_NOTE_NAME: typing.List[str] = [
	"C",
	"C#",
	"D",
	"D#",
	"E",
	"F",
	"F#",
	"G",
	"G#",
	"A",
	"A#",
	"B",
]

MAJOR_TRIAD_INTERVALS: typing.Tuple[int, int, int] = (0, 4, 7)


@dataclasses.dataclass(frozen=True)
class Chord:

	"""
	Represents a triad as three MIDI pitches: root, third and fifth.
	"""

	root: int
	third: int
	fifth: int


	@classmethod
	def major (cls, root: int) -> "Chord":

		"""Build a major triad from its root pitch.

		Example:
			```python
			Chord.major(pitches.D)   # Chord(root=62, third=66, fifth=69)
			```
		"""

		root_iv, third_iv, fifth_iv = MAJOR_TRIAD_INTERVALS

		return cls(root=root + root_iv, third=root + third_iv, fifth=root + fifth_iv)


	def pitches (self, octave_offset: int = 0) -> typing.Tuple[int, int, int]:

		"""Return the three pitches shifted by a whole number of octaves.

		Parameters:
			octave_offset: Octaves to shift; negative moves down.

		Returns:
			Tuple of (root, third, fifth) MIDI note numbers.

		Example:
			```python
			C_MAJOR.pitches()     # (60, 64, 67)
			C_MAJOR.pitches(-2)   # (36, 40, 43)
			```
		"""

		shift = octave_offset * pitches.SEMITONES_PER_OCTAVE

		return (self.root + shift, self.third + shift, self.fifth + shift)


	def name (self) -> str:

		"""
		Return a human-friendly chord name.
		"""

		return PC_TO_NOTE_NAME[self.root % 12]


C_MAJOR = Chord.major(pitches.C)
D_MAJOR = Chord.major(pitches.D)
E_MAJOR = Chord.major(pitches.E)
F_MAJOR = Chord.major(pitches.F)
G_MAJOR = Chord.major(pitches.G)
A_MAJOR = Chord.major(pitches.A)
B_MAJOR = Chord.major(pitches.B)
