"""
Config Registry CLI - Command-line interface.

Serve the API, inspect stored objects and mint local credentials.
"""

import json

import typer
from rich.console import Console
from rich.table import Table

from config_registry.auth.tokens import DEFAULT_EXPIRATION_SECONDS, create_access_token, hash_api_key
from config_registry.core.exceptions import ConfigRegistryError
from config_registry.registries import Registries, build_registries
from config_registry.settings import Settings

app = typer.Typer(
    name="config-registry",
    help="Config Registry - correlations and notification targets",
    no_args_is_help=True,
)
console = Console()


def _load_registries() -> Registries:
    try:
        registries = build_registries(Settings.from_env())
        registries.hydrate()
    except ConfigRegistryError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    return registries


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("config_registry.api.app:create_app", factory=True, host=host, port=port, reload=reload)


@app.command()
def targets(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show delivery config"),
):
    """List stored notification targets."""
    registries = _load_registries()
    target_list = registries.targets.all()
    registries.close()

    table = Table(title=f"Targets ({len(target_list)})")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Type", style="magenta")
    table.add_column("Repeat")
    if verbose:
        table.add_column("Config")

    for target in target_list:
        repeat = f"{target.notification_config.times}x every {target.notification_config.interval}m"
        row = [target.id or "", target.name, target.type.value, repeat]
        if verbose:
            row.append(json.dumps(target.config, sort_keys=True))
        table.add_row(*row)

    console.print(table)


@app.command()
def correlations():
    """List stored correlations of every user."""
    registries = _load_registries()
    correlation_list = registries.correlations.all()
    registries.close()

    table = Table(title=f"Correlations ({len(correlation_list)})")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Streams", style="green")
    table.add_column("Owner")

    for correlation in correlation_list:
        table.add_row(
            correlation.id or "",
            correlation.title or "-",
            ", ".join(correlation.stream_names()),
            (correlation.user_id or "")[:12],
        )

    console.print(table)


@app.command()
def token(
    username: str = typer.Argument(..., help="User the token identifies"),
    expires_in: int = typer.Option(
        DEFAULT_EXPIRATION_SECONDS, "--expires-in", "-e", help="Lifetime in seconds"
    ),
):
    """Mint a bearer token signed with CR_JWT_SECRET."""
    settings = Settings.from_env()
    console.print(create_access_token(username, expires_in, secret=settings.jwt_secret), soft_wrap=True)


@app.command("hash-key")
def hash_key(key: str = typer.Argument(..., help="API key to hash")):
    """Print the hash to list in CR_API_KEYS as 'hash:username'."""
    console.print(hash_api_key(key))


if __name__ == "__main__":
    app()
