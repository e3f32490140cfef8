"""CLI entry point for did-jis.

Invoked as::

    did-jis [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m did_jis.cli.main

Commands
--------
version     Show the library version
keygen      Generate a keypair and print its secret and public key
pubkey      Print the public key (hex and multibase)
create      Build did:jis:<ID>
from-key    Derive a DID from the public key
parse       Split a DID into method and id
validate    Check that a DID is a valid did:jis identifier
document    Emit a signed DID document as JSON
sign        Sign a message
verify      Verify a signature

Commands that need a key read it from ``--secret`` or ``DID_JIS_SECRET``.
Machine-readable values (DIDs, signatures, documents) are written plain so
they can be piped; failures exit with the error's status code.
"""
from __future__ import annotations

import logging
import sys
from typing import Callable, TypeVar

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from did_jis.config import EngineSettings
from did_jis.engine import DIDEngine
from did_jis.errors import DIDJISError

console = Console()
err_console = Console(stderr=True)

_T = TypeVar("_T")

_secret_option = click.option(
    "--secret",
    envvar="DID_JIS_SECRET",
    required=True,
    help="64-character hex secret key (or set DID_JIS_SECRET).",
)


def _run(action: Callable[[], _T]) -> _T:
    """Run *action*, turning library errors into a message and exit status."""
    try:
        return action()
    except DIDJISError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(int(exc.code))


def _display(text: str) -> str:
    """Make argv text printable even when it was not valid UTF-8."""
    return text.encode("utf-8", "backslashreplace").decode("utf-8")


def _engine(secret: str) -> DIDEngine:
    return _run(lambda: DIDEngine.from_secret(secret, EngineSettings.from_env()))


# ------------------------------------------------------------------
# Root group
# ------------------------------------------------------------------


@click.group()
@click.version_option(package_name="did-jis")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity.",
)
def cli(log_level: str) -> None:
    """Decentralized identifiers for the did:jis method"""
    logging.basicConfig(level=getattr(logging, log_level.upper()))


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    console.print(f"[bold]did-jis[/bold] v{DIDEngine.version()}")


# ------------------------------------------------------------------
# Keys
# ------------------------------------------------------------------


@cli.command(name="keygen")
def keygen_command() -> None:
    """Generate a fresh Ed25519 keypair."""
    with _run(DIDEngine.new) as engine:
        table = Table(title="New did:jis keypair", show_header=True)
        table.add_column("Field", style="cyan")
        table.add_column("Value", overflow="fold")
        table.add_row("Secret (hex)", engine.secret_key_hex())
        table.add_row("Public (hex)", engine.public_key_hex())
        table.add_row("Public (multibase)", engine.public_key_multibase())
        table.add_row("DID from key", engine.create_from_key())
        console.print(table)
        console.print("[yellow]Keep the secret key private.[/yellow]")


@cli.command(name="pubkey")
@_secret_option
@click.option("--multibase", is_flag=True, help="Print the multibase form only.")
def pubkey_command(secret: str, multibase: bool) -> None:
    """Print the public key for --secret."""
    with _engine(secret) as engine:
        click.echo(engine.public_key_multibase() if multibase else engine.public_key_hex())


# ------------------------------------------------------------------
# Identifiers
# ------------------------------------------------------------------


@cli.command(name="create")
@click.argument("identifier")
def create_command(identifier: str) -> None:
    """Build did:jis:IDENTIFIER."""
    from did_jis.did.identifier import create

    click.echo(str(_run(lambda: create(identifier))))


@cli.command(name="from-key")
@_secret_option
def from_key_command(secret: str) -> None:
    """Derive a DID from the public key of --secret."""
    with _engine(secret) as engine:
        click.echo(engine.create_from_key())


@cli.command(name="parse")
@click.argument("did")
def parse_command(did: str) -> None:
    """Split DID into its method and id."""
    method, method_specific_id = _run(lambda: DIDEngine.parse(did))
    console.print(f"  Method: {method}")
    console.print(f"  ID:     {method_specific_id}", markup=False)


@cli.command(name="validate")
@click.argument("did")
def validate_command(did: str) -> None:
    """Check that DID is a valid did:jis identifier."""
    if DIDEngine.is_valid(did):
        console.print(f"[green]VALID[/green]  {escape(_display(did))}")
    else:
        console.print(f"[red]INVALID[/red]  {escape(_display(did))}")
        sys.exit(1)


# ------------------------------------------------------------------
# Documents
# ------------------------------------------------------------------


@cli.command(name="document")
@click.argument("did")
@_secret_option
@click.option("--compact", is_flag=True, help="Emit single-line JSON.")
def document_command(did: str, secret: str, compact: bool) -> None:
    """Emit a signed DID document for DID."""
    with _engine(secret) as engine:
        document = _run(lambda: engine.build_document(did))
        click.echo(document.to_json(indent=None if compact else 2))


# ------------------------------------------------------------------
# Signing
# ------------------------------------------------------------------


@cli.command(name="sign")
@click.argument("message")
@_secret_option
def sign_command(message: str, secret: str) -> None:
    """Sign MESSAGE and print the hex signature."""
    with _engine(secret) as engine:
        click.echo(engine.sign(message))


@cli.command(name="verify")
@click.argument("message")
@click.argument("signature")
@click.option(
    "--public-key",
    default=None,
    help="64-character hex public key. Defaults to the key of --secret.",
)
@click.option(
    "--secret",
    envvar="DID_JIS_SECRET",
    default=None,
    help="64-character hex secret key (or set DID_JIS_SECRET).",
)
def verify_command(
    message: str,
    signature: str,
    public_key: str | None,
    secret: str | None,
) -> None:
    """Verify SIGNATURE over MESSAGE."""
    if public_key is not None:
        valid = DIDEngine.verify_with_key(message, signature, public_key)
    elif secret is not None:
        with _engine(secret) as engine:
            valid = _run(lambda: engine.verify(message, signature))
    else:
        raise click.UsageError("Provide --public-key or --secret.")

    if valid:
        console.print("[green]VALID[/green]  signature verified")
    else:
        console.print("[red]INVALID[/red]  signature does not match")
        sys.exit(1)


if __name__ == "__main__":
    cli()
