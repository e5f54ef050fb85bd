"""Ownership of the MIDI port and the elevated session.

``ResourceManager`` opens both at startup and releases both on the explicit
shutdown path.  The port is lent to :class:`cpuears.player.MidoOutput`; only the
manager closes it.  Release after a crash or external kill is not attempted.
"""

import logging
import typing

import cpuears.config
import cpuears.midi_utils
import cpuears.session


logger = logging.getLogger(__name__)


class ResourceManager:

	"""Open and release the MIDI output device and the elevated session.

	Example::

		with ResourceManager(settings) as resources:
		    player = MidiChordPlayer(MidoOutput(resources.midi_out))
		    ...
	"""

	def __init__ (self, settings: cpuears.config.Settings) -> None:

		self.settings = settings
		self.device_name: typing.Optional[str] = None
		self.midi_out: typing.Any = None
		self.session: cpuears.session.Session = cpuears.session.NullSession()

	def acquire_session (self) -> None:

		"""Acquire the elevated session when a login is configured.

		Raises:
			cpuears.session.CredentialError: If acquisition fails.
		"""

		if not self.settings.wants_elevation:
			return

		session = cpuears.session.ElevatedSession(
			login = self.settings.login,
			domain = self.settings.domain,
			password = self.settings.password,
		)
		session.acquire()
		self.session = session

	def open_output (self) -> None:

		"""Open the configured MIDI output, or the first one enumerated.

		Raises:
			cpuears.midi_utils.StartupError: If no output can be opened.
		"""

		self.device_name, self.midi_out = cpuears.midi_utils.select_output_device(self.settings.device)

	def release (self) -> None:

		"""Close the port and release the session.  Safe to call more than once.

		The session is released even if closing the port fails.
		"""

		try:
			if self.midi_out is not None:
				self.midi_out.close()
				logger.info(f"Closed MIDI output: {self.device_name}")

		finally:
			self.midi_out = None

			try:
				self.session.release()
			except OSError:
				logger.exception("Failed to release elevated session")
			finally:
				self.session = cpuears.session.NullSession()

	def __enter__ (self) -> "ResourceManager":

		self.open_output()
		return self

	def __exit__ (self, *_: typing.Any) -> None:

		self.release()
