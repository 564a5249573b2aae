"""Provisioning error taxonomy.

Every step failure surfaces as one of the ``ProvisionError`` subclasses below,
carrying the failing step name and the underlying cause. ``exit_code`` is what
the CLI exits with.
"""


class ProvisionError(Exception):
    """A provisioning step failed; the run halts."""

    exit_code = 1

    def __init__(self, step: str, message: str, cause: BaseException | None = None):
        self.step = step
        self.message = message
        self.cause = cause
        super().__init__(f"{step}: {message}")


class BackendError(ProvisionError):
    """Target creation, start or control failure."""

    exit_code = 10


class PackageError(ProvisionError):
    """Package index, dependency or virtualenv install failure."""

    exit_code = 11


class FilesystemError(ProvisionError):
    """Account, directory, file or permission failure."""

    exit_code = 12


class NetworkError(ProvisionError):
    """Application source fetch failure."""

    exit_code = 13


class ServiceError(ProvisionError):
    """Service unit install or service start failure."""

    exit_code = 14


class VerificationError(ProvisionError):
    """Post-install health check did not pass in time."""

    exit_code = 15
