"""
cpuears - listen to your CPU.

cpuears samples system-wide CPU utilisation twice a second and plays it as a
major triad on a MIDI output device.  Low load sounds C major two octaves
down; as load climbs the chord steps up through D, E, F, G, A and B and the
register rises, topping out at E major two octaves up.  Only one chord sounds
at a time: each new chord is preceded by note-offs for the last one.

It generates pure MIDI (no audio engine).  Route it to a hardware synth, a
software instrument, or your DAW.

Run it from the command line::

	python -m cpuears                 # first MIDI output, this machine
	python -m cpuears -d "IAC Bus 1"  # a specific output

Press ESC (or Ctrl+C) to stop.  The last chord is silenced and the device is
released before exit.

Or drive it from Python:

```python
import cpuears

monitor = cpuears.Monitor(cpuears.Settings())
monitor.open()
monitor.play()
```

Package-level exports: ``Monitor``, ``Settings``, ``Chord``, ``map_value``,
``MidiChordPlayer``, ``Scheduler``.
"""

import cpuears.chord_mapper
import cpuears.chords
import cpuears.config
import cpuears.monitor
import cpuears.player
import cpuears.scheduler

from cpuears.chord_mapper import map_value
from cpuears.chords import Chord
from cpuears.config import Settings
from cpuears.monitor import Monitor
from cpuears.player import MidiChordPlayer
from cpuears.scheduler import Scheduler
