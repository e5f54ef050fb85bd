"""MIDI message constants for chord playback."""

# All chords are sent on the first channel.
CHORD_CHANNEL = 0

NOTE_ON_VELOCITY = 127
NOTE_OFF_VELOCITY = 0
