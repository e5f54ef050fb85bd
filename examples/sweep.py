"""Play every chord band in turn, from idle to flat out.

Useful for checking a synth patch before pointing cpuears at a real CPU.
Ramps a fake metric from 0 to 100 and back, one step per cycle.
"""

import logging

import cpuears


logging.basicConfig(level=logging.INFO)


class Sweep:

	def __init__ (self, step: float = 5.0) -> None:

		up = [i * step for i in range(int(100 / step) + 1)]
		self.values = up + up[-2:0:-1]
		self.index = 0

	def sample (self) -> float:

		value = self.values[self.index % len(self.values)]
		self.index += 1
		return value


monitor = cpuears.Monitor(cpuears.Settings(period=0.4), source=Sweep())
monitor.open()
monitor.play()
