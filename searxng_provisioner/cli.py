import json as json_lib

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table
import typer

from .backends import BACKENDS, LocalBackend, get_backend
from .config import get_settings
from .errors import ProvisionError
from .logging import setup_logging
from .provisioner import Provisioner
from .rendering import render_unit
from .schemas import TargetSizing, TargetSpec
from .steps import build_service_config

app = typer.Typer(
    name="searxng-provision",
    help="Provision a SearXNG instance into an LXC container or the local host",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)

INVALID_INPUT_EXIT_CODE = 2


@app.command()
def provision(
    backend: str = typer.Option("lxc", help=f"Target backend: {', '.join(BACKENDS)}"),
    ctid: str | None = typer.Option(
        None, "--ctid", help="Target ID; allocated when omitted (lxc), host name (local)"
    ),
    name: str = typer.Option("searxng", help="Container name"),
    hostname: str = typer.Option("searxng-server", help="Container hostname"),
    cores: int = typer.Option(2, help="CPU cores"),
    memory: int = typer.Option(2048, help="Memory in MB"),
    swap: int = typer.Option(512, help="Swap in MB"),
    disk: int = typer.Option(8, help="Root disk in GB"),
    regenerate_config: bool = typer.Option(
        False, "--regenerate-config", help="Rewrite settings.yml with a new secret key"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Create (or reuse) a target and install SearXNG on it."""
    settings = get_settings()
    setup_logging(settings.service_name, settings.log_format, settings.log_level)

    try:
        target_backend = get_backend(backend, settings)
        if backend == "local" and ctid is None:
            ctid = LocalBackend.default_target_id()
        spec = TargetSpec(
            target_id=ctid,
            name=name,
            hostname=hostname,
            sizing=TargetSizing(cores=cores, memory_mb=memory, swap_mb=swap, disk_gb=disk),
        )
    except (ValueError, ValidationError) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=INVALID_INPUT_EXIT_CODE) from e

    provisioner = Provisioner(target_backend, settings)
    ctx = provisioner.new_context(spec, regenerate_config=regenerate_config)

    try:
        provisioner.run(ctx)
    except ProvisionError as e:
        err_console.print(f"[red]Provisioning failed at step[/red] [bold]{e.step}[/bold]")
        err_console.print(f"[red]Cause:[/red] {e.message}")
        err_console.print(
            "[yellow]The target was left as-is; fix the cause and re-run.[/yellow]"
        )
        raise typer.Exit(code=e.exit_code) from e

    target = ctx.target
    secret = (
        ctx.service_config.secret_key.get_secret_value() if ctx.service_config else None
    )
    url = f"http://{target.address}:{settings.searxng_port}" if target.address else None

    if json_output:
        typer.echo(
            json_lib.dumps(
                {
                    "target": target.model_dump(),
                    "run_id": ctx.run_id,
                    "state": ctx.state.value,
                    "secret_key": secret,
                    "config_written": ctx.config_written,
                    "url": url,
                },
                indent=2,
            )
        )
        return

    table = Table(title="SearXNG installation complete")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Target ID", str(target.target_id))
    table.add_row("Address", target.address or "unknown")
    table.add_row("Name", target.name)
    table.add_row("Hostname", target.hostname)
    table.add_row("Cores", str(target.sizing.cores))
    table.add_row("Memory", f"{target.sizing.memory_mb} MB")
    table.add_row("Swap", f"{target.sizing.swap_mb} MB")
    table.add_row("Disk", f"{target.sizing.disk_gb} GB")
    table.add_row("Secret key", secret or "unchanged (existing settings.yml kept)")
    table.add_row("Redis URL", settings.redis_url)
    console.print(table)

    if url:
        console.print(f"\n[green]SearXNG is available at[/green] {url}")
    if backend == "lxc":
        console.print(
            f"Connect to the container with: [yellow]pct enter {target.target_id}[/yellow]"
        )


@app.command("render-config")
def render_config():
    """Print settings.yml (with a fresh secret key) and the systemd unit."""
    settings = get_settings()
    typer.echo(f"# {settings.settings_path}")
    typer.echo(build_service_config(settings).render())
    typer.echo(f"# {settings.unit_path}")
    typer.echo(render_unit(settings))


def main():
    """Entry point for the searxng-provision script."""
    app()


if __name__ == "__main__":
    main()
