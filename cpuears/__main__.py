import argparse
import logging
import sys
import typing

import cpuears.config
import cpuears.metrics
import cpuears.midi_utils
import cpuears.monitor
import cpuears.session


logger = logging.getLogger(__name__)


def build_parser () -> argparse.ArgumentParser:

	"""
	Command-line flags.  Every flag defaults to ``None`` so the config file wins when it is unset.
	"""

	ap = argparse.ArgumentParser(prog="cpuears", description="Listen to your CPU: play a major triad for the current CPU load via MIDI")
	ap.add_argument("-m", "--machine", help="Machine whose CPU counter is sampled (default: this machine)")
	ap.add_argument("-dl", "--domain-login", dest="domain_login", help="Domain login for the elevated session, e.g. CompanyDomain\\username")
	ap.add_argument("-p", "--password", help="Password for --domain-login (prompted for when omitted)")
	ap.add_argument("-d", "--device", help="MIDI output device name (default: first available)")
	ap.add_argument("-c", "--config", default="cpuears.yaml", help="YAML config file (default: cpuears.yaml)")
	ap.add_argument("--period", type=float, help="Seconds between chords (default: 0.5)")
	ap.add_argument("--delay", type=float, dest="initial_delay", help="Seconds before the first chord (default: 0.1)")
	ap.add_argument("-v", "--verbose", action="store_true", help="Log every sample")

	return ap


def main (argv: typing.Optional[typing.List[str]] = None) -> int:

	"""
	Entry point.  Returns the process exit code.
	"""

	args = build_parser().parse_args(argv)

	logging.basicConfig(level=logging.INFO)

	try:
		overrides = {
			"machine": args.machine,
			"domain_login": args.domain_login,
			"password": args.password,
			"device": args.device,
			"period": args.period,
			"initial_delay": args.initial_delay,
			"log_level": "DEBUG" if args.verbose else None,
		}
		settings = cpuears.config.build_settings(cpuears.config.load_config(args.config), overrides)

	except ValueError as exc:
		logger.error(f"Invalid configuration: {exc}")
		return 2

	logging.getLogger().setLevel(str(settings.log_level).upper())

	cpuears.config.ensure_password(settings)

	monitor = cpuears.monitor.Monitor(settings)

	try:
		monitor.open()

	except (cpuears.midi_utils.StartupError, cpuears.metrics.MetricSourceError, cpuears.session.CredentialError) as exc:
		logger.error(str(exc))
		return 1

	monitor.play()

	return 0


if __name__ == "__main__":
	sys.exit(main())
