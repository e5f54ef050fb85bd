import logging
import typing

import mido

logger = logging.getLogger(__name__)


class StartupError (Exception):

	"""Raised when no usable MIDI output can be opened.  Nothing has played yet."""


def select_output_device (device_name: typing.Optional[str] = None) -> typing.Tuple[str, typing.Any]:

	"""
	Select and open a MIDI output device.

	If `device_name` is provided, opens that specific device.
	If `device_name` is None, opens the first device the MIDI subsystem
	enumerates.

	Returns:
		A tuple of (device_name, midi_out_object).

	Raises:
		StartupError: If there are no outputs, the named device is missing,
			or the port fails to open.
	"""

	try:
		outputs = mido.get_output_names()
	except Exception as e:
		raise StartupError(f"Could not list MIDI outputs: {e}") from e

	logger.info(f"Available MIDI outputs: {outputs}")

	if not outputs:
		raise StartupError("No MIDI output devices available.")

	if device_name is not None:
		if device_name not in outputs:
			raise StartupError(
				f"MIDI output device '{device_name}' not found. "
				f"Available devices: {outputs}"
			)
		selected_name = device_name

	else:
		selected_name = outputs[0]

	try:
		midi_out = mido.open_output(selected_name)
	except Exception as e:
		raise StartupError(f"Failed to open MIDI output '{selected_name}': {e}") from e

	logger.info(f"Opened MIDI output: {selected_name}")

	return selected_name, midi_out
