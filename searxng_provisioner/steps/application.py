"""Application steps: source checkout and virtualenv."""

import structlog

from ..context import ProvisionContext, ProvisionState
from ..errors import FilesystemError, NetworkError, PackageError
from .base import Step

logger = structlog.get_logger()

REV_MODE = "644"


def source_revision(ctx: ProvisionContext) -> str:
    """HEAD of the checkout on the target."""
    return ctx.shell.output(
        ["git", "-C", ctx.settings.src_dir, "rev-parse", "HEAD"],
        user=ctx.settings.service_user,
    )


class FetchApplicationSource(Step):
    """Clone the SearXNG repository, or fast-forward an existing checkout.

    Never skipped: an existing checkout is always brought up to date.
    """

    name = "fetch_application_source"
    error_class = NetworkError

    def apply(self, ctx: ProvisionContext) -> None:
        shell = ctx.shell
        s = ctx.settings

        if shell.path_exists(f"{s.src_dir}/.git", "-d"):
            before = source_revision(ctx)
            shell.run(["git", "-C", s.src_dir, "pull", "--ff-only"], user=s.service_user)
            after = source_revision(ctx)
            ctx.source_changed = before != after
            logger.info(
                "source_updated",
                changed=ctx.source_changed,
                revision=after[:12],
            )
            return

        if shell.path_exists(s.src_dir):
            raise FilesystemError(self.name, f"{s.src_dir} exists but is not a git checkout")

        shell.run(["git", "clone", s.repo_url, s.src_dir], user=s.service_user)
        ctx.source_changed = True
        logger.info("source_cloned", repo_url=s.repo_url, revision=source_revision(ctx)[:12])


class BuildPythonEnv(Step):
    """Create the virtualenv and install SearXNG into it.

    The revision installed is recorded next to the venv once ``pip install -e``
    succeeds, so a checkout that moved ahead of the venv is rebuilt even when
    the pull happened in an earlier, failed run.
    """

    name = "build_python_env"
    error_class = PackageError
    advances_to = ProvisionState.APP_INSTALLED

    def is_satisfied(self, ctx: ProvisionContext) -> bool:
        shell = ctx.shell
        s = ctx.settings
        if not shell.succeeds([s.venv_python, "-c", "import searx"], user=s.service_user):
            return False
        installed = shell.read_file(s.installed_rev_path)
        revision = source_revision(ctx)
        if installed is None or installed.strip() != revision:
            logger.info(
                "venv_out_of_date",
                installed=installed.strip()[:12] if installed else None,
                revision=revision[:12],
            )
            return False
        return True

    def apply(self, ctx: ProvisionContext) -> None:
        shell = ctx.shell
        s = ctx.settings
        pip = [s.venv_python, "-m", "pip", "install"]

        # Installed code is about to change; a running instance must pick it up
        ctx.request_restart()

        if not shell.path_exists(s.venv_python, "-x"):
            shell.run(["python3", "-m", "venv", s.venv_dir], user=s.service_user)

        shell.run([*pip, "--upgrade", "pip", "setuptools", "wheel"], user=s.service_user)
        shell.run([*pip, "pyyaml"], user=s.service_user)
        shell.run([*pip, "-e", s.src_dir], user=s.service_user)

        revision = source_revision(ctx)
        shell.install_file(
            s.installed_rev_path,
            f"{revision}\n",
            mode=REV_MODE,
            owner=s.service_user,
            group=s.service_user,
        )
        logger.info("venv_built", revision=revision[:12])
