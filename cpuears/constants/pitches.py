"""Named pitch constants for the octave starting at Middle C.

Convention: **C4 = 60**, matching the MIDI Manufacturers Association standard.
Sharps use an ``S`` suffix (``CS`` is C#).  Values are plain integers so that
octave shifts are ordinary arithmetic::

    import cpuears.constants.pitches as pitches

    pitches.E + 12    # 76, E one octave up
"""

C  = 60
CS = 61
D  = 62
DS = 63
E  = 64
F  = 65
FS = 66
G  = 67
GS = 68
A  = 69
AS = 70
B  = 71

SEMITONES_PER_OCTAVE = 12

MIN_PITCH = 0
MAX_PITCH = 127
