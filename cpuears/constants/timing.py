"""Scheduler timing, in seconds."""

INITIAL_DELAY = 0.1
CYCLE_PERIOD = 0.5
