"""Constants for cpuears.

- ``cpuears.constants.pitches`` - Named pitch constants for one octave, C4 = 60 (Middle C)
- ``cpuears.constants.midi`` - MIDI channel and velocity values used for chords
- ``cpuears.constants.timing`` - Scheduler delay and period
"""
