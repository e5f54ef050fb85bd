"""Elevated execution context for counter access.

When a login is configured the monitor samples the counter as that account.
The session is acquired once at startup and released on shutdown.

On POSIX the account's password is checked through PAM (``python-pam``), then
the effective user id is switched to the account with :func:`os.seteuid` and
restored on release.  The switch needs a privileged process.  The password is
never logged.
"""

import logging
import os
import typing


logger = logging.getLogger(__name__)


class CredentialError (Exception):

	"""Raised when the elevated session cannot be acquired."""


def pam_authenticate (login: str, password: str) -> None:

	"""Check ``password`` for ``login`` with the ``login`` PAM service.

	Raises:
		CredentialError: PAM is unavailable or rejected the credentials.
	"""

	try:
		import pam  # noqa: PLC0415
		checker = pam.pam()
	except (ImportError, OSError, AttributeError) as exc:
		# AttributeError: python-pam is installed but libpam is not.
		raise CredentialError(f"Password checks need PAM: {exc}") from exc

	if not checker.authenticate(login, password):
		raise CredentialError(f"Login failed for {login!r}: {checker.reason}")


class NullSession:

	"""Session used when no login is configured.  Does nothing."""

	active: bool = False

	def acquire (self) -> None:
		return None

	def release (self) -> None:
		return None


class ElevatedSession:

	"""Run as another account between :meth:`acquire` and :meth:`release`.

	Example::

		with ElevatedSession("monitor", domain="CORP", password=secret):
		    source.sample()
	"""

	def __init__ (
		self,
		login: str,
		domain: str = "",
		password: str = "",
		authenticate: typing.Optional[typing.Callable[[str, str], None]] = None,
	) -> None:

		"""
		Parameters:
			login: Account to run as.
			domain: Informational; PAM has no notion of a domain.
			password: Checked by ``authenticate`` before switching.
			authenticate: Raises ``CredentialError`` for bad credentials;
				defaults to :func:`pam_authenticate`.
		"""

		if not login:
			raise CredentialError("A login is required for an elevated session (expected DOMAIN\\user)")

		self.login = login
		self.domain = domain
		self._password = password
		self._authenticate = authenticate
		self._saved_euid: typing.Optional[int] = None

		#: ``True`` between a successful :meth:`acquire` and :meth:`release`.
		self.active: bool = False

	def __repr__ (self) -> str:

		return f"ElevatedSession(login={self.login!r}, domain={self.domain!r})"

	def acquire (self) -> None:

		"""Check the password, then switch the effective user to :attr:`login`.

		Raises:
			CredentialError: If the platform has no such primitive, the account
				does not exist, the password is rejected, or the switch is not
				permitted.
		"""

		if self.active:
			return

		try:
			import pwd  # noqa: PLC0415
		except ImportError as exc:
			raise CredentialError("Elevated sessions require a POSIX operating system") from exc

		try:
			target_uid = pwd.getpwnam(self.login).pw_uid
		except KeyError as exc:
			raise CredentialError(f"Unknown account: {self.login!r}") from exc

		authenticate = self._authenticate if self._authenticate is not None else pam_authenticate
		authenticate(self.login, self._password)

		saved = os.geteuid()

		try:
			os.seteuid(target_uid)
		except OSError as exc:
			raise CredentialError(f"Could not switch to account {self.login!r}: {exc}") from exc

		self._saved_euid = saved
		self.active = True

		logger.info(f"Elevated session acquired for {self.login!r}")

	def release (self) -> None:

		"""Restore the original effective user.  Safe to call more than once."""

		if not self.active or self._saved_euid is None:
			return

		os.seteuid(self._saved_euid)

		self._saved_euid = None
		self.active = False

		logger.info("Elevated session released")

	def __enter__ (self) -> "ElevatedSession":

		self.acquire()
		return self

	def __exit__ (self, *_: typing.Any) -> None:

		self.release()


Session = typing.Union[NullSession, ElevatedSession]
