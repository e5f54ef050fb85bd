"""Map a utilisation value onto a chord and an octave offset.

Decile bands give a rising pitch and register as load increases.  The table is
scanned in ascending order and the first band containing the value wins.  The
last band has no bounds of its own: any value the first nine do not capture
(negative, 90 and above, NaN, infinities) falls through to it, so
:func:`map_value` is total over all floats.
"""

import dataclasses
import math
import typing

import cpuears.chords


@dataclasses.dataclass(frozen=True)
class ChordBand:

	"""A half-open interval ``[low, high)`` of metric values and the chord it selects."""

	low: float
	high: float
	chord: cpuears.chords.Chord
	octave: int

	def contains (self, value: float) -> bool:

		"""Return True when ``low <= value < high``.  Always False for NaN."""

		return self.low <= value < self.high


BANDS: typing.Tuple[ChordBand, ...] = (
	ChordBand(0, 10, cpuears.chords.C_MAJOR, -2),
	ChordBand(10, 20, cpuears.chords.D_MAJOR, -1),
	ChordBand(20, 30, cpuears.chords.E_MAJOR, -1),
	ChordBand(30, 40, cpuears.chords.F_MAJOR, 0),
	ChordBand(40, 50, cpuears.chords.G_MAJOR, 0),
	ChordBand(50, 60, cpuears.chords.A_MAJOR, 0),
	ChordBand(60, 70, cpuears.chords.B_MAJOR, 0),
	ChordBand(70, 80, cpuears.chords.C_MAJOR, 1),
	ChordBand(80, 90, cpuears.chords.D_MAJOR, 2),
	# Catch-all: its bounds are informational only.
	ChordBand(90, math.inf, cpuears.chords.E_MAJOR, 2),
)

FALLBACK_INDEX = len(BANDS) - 1


def band_index (value: float) -> int:

	"""Return the index into :data:`BANDS` selected for ``value``.

	Example:
		```python
		band_index(42.5)   # → 4
		band_index(-5)     # → 9 (catch-all)
		```
	"""

	for index, band in enumerate(BANDS[:FALLBACK_INDEX]):
		if band.contains(value):
			return index

	return FALLBACK_INDEX


def map_value (value: float) -> typing.Tuple[cpuears.chords.Chord, int]:

	"""Return the ``(chord, octave_offset)`` pair for a metric value.

	Never raises.

	Example:
		```python
		map_value(5)    # → (C_MAJOR, -2)
		map_value(95)   # → (E_MAJOR, 2)
		```
	"""

	band = BANDS[band_index(value)]

	return band.chord, band.octave
