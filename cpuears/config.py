"""Startup configuration.

Settings come from an optional YAML file, overridden by command-line flags:

```yaml
machine: ""                     # counter host, empty for this machine
domain_login: "CORP\\monitor"   # optional DOMAIN\\user for the elevated session
device: "IAC Driver Bus 1"      # optional, defaults to the first MIDI output
period: 0.5
initial_delay: 0.1
log_level: INFO
```
"""

import dataclasses
import getpass
import logging
import os
import typing

import yaml

import cpuears.constants.timing


logger = logging.getLogger(__name__)


@dataclasses.dataclass
class Settings:

	"""Everything the monitor needs to start.

	Attributes:
		machine: Host whose CPU counter is sampled; empty for this machine.
		domain_login: ``DOMAIN\\user`` for the elevated session, or empty.
		password: Password for ``domain_login``; prompted for when missing.
		device: MIDI output name; ``None`` opens the first enumerated device.
		period: Seconds between cycles.
		initial_delay: Seconds before the first cycle.
		log_level: Name of the root logging level.
	"""

	machine:       str = ""
	domain_login:  str = ""
	password:      str = ""
	device:        typing.Optional[str] = None
	period:        float = cpuears.constants.timing.CYCLE_PERIOD
	initial_delay: float = cpuears.constants.timing.INITIAL_DELAY
	log_level:     str = "INFO"

	@property
	def domain (self) -> str:

		return split_domain_login(self.domain_login)[0]

	@property
	def login (self) -> str:

		return split_domain_login(self.domain_login)[1]

	@property
	def wants_elevation (self) -> bool:

		return bool(self.domain_login)


def split_domain_login (domain_login: str) -> typing.Tuple[str, str]:

	"""Split ``DOMAIN\\user`` into ``(domain, user)``.

	Anything that is not exactly two backslash-separated parts gives
	``("", "")``.

	Example:
		```python
		split_domain_login("CORP\\alice")   # → ("CORP", "alice")
		split_domain_login("alice")         # → ("", "")
		```
	"""

	if not domain_login:
		return "", ""

	parts = domain_login.split("\\")

	if len(parts) == 2:
		return parts[0], parts[1]

	return "", ""


def load_config (config_path: str) -> typing.Dict[str, typing.Any]:

	"""
	Load configuration from a YAML file.  A missing file gives an empty dict.

	Raises:
		ValueError: The file is not valid YAML or is not a mapping.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, 'r') as f:
		try:
			data = yaml.safe_load(f)
		except yaml.YAMLError as exc:
			raise ValueError(f"Config file {config_path} is not valid YAML: {exc}") from exc

	if data is None:
		return {}

	if not isinstance(data, dict):
		raise ValueError(f"Config file {config_path} must contain a mapping, got {type(data).__name__}")

	return data


def build_settings (file_values: typing.Dict[str, typing.Any], overrides: typing.Dict[str, typing.Any]) -> Settings:

	"""Merge file values with command-line overrides into a ``Settings``.

	Overrides that are ``None`` are ignored so unset flags do not clobber the
	file.  Unknown keys raise ``ValueError``.
	"""

	known = {field.name for field in dataclasses.fields(Settings)}
	merged: typing.Dict[str, typing.Any] = {}

	for source in (file_values, overrides):
		for key, value in source.items():
			if key not in known:
				raise ValueError(f"Unknown setting: {key!r}")
			if value is not None:
				merged[key] = value

	for key in ("period", "initial_delay"):
		if key in merged:
			merged[key] = _as_seconds(key, merged[key])

	settings = Settings(**merged)

	if not settings.period > 0:
		raise ValueError(f"period must be positive, got {settings.period}")

	if not settings.initial_delay >= 0:
		raise ValueError(f"initial_delay must not be negative, got {settings.initial_delay}")

	if not isinstance(logging.getLevelName(str(settings.log_level).upper()), int):
		raise ValueError(f"Unknown log level: {settings.log_level!r}")

	return settings


def _as_seconds (key: str, value: typing.Any) -> float:

	if isinstance(value, bool):
		raise ValueError(f"{key} must be a number of seconds, got {value!r}")

	try:
		return float(value)
	except (TypeError, ValueError) as exc:
		raise ValueError(f"{key} must be a number of seconds, got {value!r}") from exc


def ensure_password (settings: Settings, prompt: typing.Callable[[str], str] = getpass.getpass) -> None:

	"""Ask for a masked password when a login was given without one."""

	if not settings.domain_login or settings.password:
		return

	settings.password = prompt("Enter your password: ")
