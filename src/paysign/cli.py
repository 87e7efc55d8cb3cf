"""Paysign CLI — Typer app for keys, canonical bodies, and signed tokens."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from paysign import __version__
from paysign.digest import DigestAlgorithm, digest_body
from paysign.exceptions import PaysignError
from paysign.headers import compose_auth_headers
from paysign.keys import generate_rsa_keypair
from paysign.models import PartnerIdentity, PartnerRole, SigningContext
from paysign.tokens import inspect_token, sign_token, verify_token

console = Console()
app = typer.Typer(
    name="paysign",
    help="Paysign — RS256 request signing for the payware platform",
    no_args_is_help=True,
)

# --- Sub-apps ---
keys_app = typer.Typer(help="Manage RSA key pairs")
token_app = typer.Typer(help="Create and inspect signed tokens")
app.add_typer(keys_app, name="keys")
app.add_typer(token_app, name="token")


def _read_json(file: Path) -> Any:
    if not file.exists():
        console.print(f"[red]File not found: {file}[/red]")
        raise typer.Exit(1)
    try:
        return json.loads(file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON in {file}: {e}[/red]")
        raise typer.Exit(1)


def _read_text(file: Path) -> str:
    if not file.exists():
        console.print(f"[red]File not found: {file}[/red]")
        raise typer.Exit(1)
    return file.read_text(encoding="utf-8")


# --- Version ---

def _version_callback(value: bool):
    if value:
        console.print(f"paysign {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(False, "--version", "-v", callback=_version_callback, is_eager=True),
):
    pass


# --- Key Commands ---

@keys_app.command("generate")
def keys_generate(
    size: int = typer.Option(2048, "--size", help="RSA key size in bits"),
    out: Optional[Path] = typer.Option(None, "--out", help="Directory for private.pem / public.pem"),
):
    """Generate an RSA key pair for platform registration."""
    try:
        pair = generate_rsa_keypair(size)
    except PaysignError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if out is None:
        console.print(pair.private_key, end="", markup=False, highlight=False, soft_wrap=True)
        console.print(pair.public_key, end="", markup=False, highlight=False, soft_wrap=True)
        return

    out.mkdir(parents=True, exist_ok=True)
    private_path = out / "private.pem"
    public_path = out / "public.pem"
    private_path.write_text(pair.private_key, encoding="utf-8")
    private_path.chmod(0o600)
    public_path.write_text(pair.public_key, encoding="utf-8")
    console.print(f"[green]Key pair generated:[/green] {pair.key_size} bits")
    console.print(f"  Private: {private_path}")
    console.print(f"  Public:  {public_path}")
    console.print("[yellow]Register the public key with the payware sandbox; never share the private key.[/yellow]")


# --- Canonical Body ---

@app.command("canonical")
def canonical(
    file: Path = typer.Argument(..., help="JSON request body"),
    md5: bool = typer.Option(False, "--md5", help="Use deprecated contentMd5"),
):
    """Print the canonical body and its content digest."""
    body = _read_json(file)
    if body is None:
        console.print("[yellow]No body (null): no content digest[/yellow]")
        raise typer.Exit(1)
    algorithm = DigestAlgorithm.MD5 if md5 else DigestAlgorithm.SHA256
    try:
        text, digest = digest_body(body, algorithm)
    except PaysignError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(text, markup=False, highlight=False, soft_wrap=True)
    console.print(f"{algorithm.value}: {digest}", markup=False, highlight=False, soft_wrap=True)


# --- Token Commands ---

@token_app.command("create")
def token_create(
    partner_id: str = typer.Option(..., "--partner-id", help="Issuing partner id"),
    key: Path = typer.Option(..., "--key", help="PEM private key file"),
    role: str = typer.Option("merchant", "--role", help="merchant, isv or payment_institution"),
    body: Optional[Path] = typer.Option(None, "--body", help="JSON request body"),
    merchant: Optional[str] = typer.Option(None, "--merchant", help="Merchant partner id (isv delegated)"),
    oauth2_token: Optional[str] = typer.Option(None, "--oauth2-token", help="Merchant-granted oauth2 token"),
    oauth2: bool = typer.Option(False, "--oauth2", help="Target the oauth2 endpoints (isv)"),
):
    """Sign a request and print token, headers and body as JSON."""
    try:
        partner_role = PartnerRole(role)
    except ValueError:
        console.print(f"[red]Invalid role: {role}. Use merchant, isv or payment_institution.[/red]")
        raise typer.Exit(1)

    request_body = _read_json(body) if body else None
    identity = PartnerIdentity(
        partner_id=partner_id, role=partner_role, private_key=_read_text(key),
    )
    try:
        if oauth2:
            ctx = SigningContext.oauth2(identity, request_body)
        elif merchant or oauth2_token:
            ctx = SigningContext.delegated(identity, merchant or "", oauth2_token or "", request_body)
        else:
            ctx = SigningContext.first_party(identity, request_body)
        signed = sign_token(ctx, identity.private_key)
    except PaysignError as e:
        console.print(f"[red]Signing failed: {e}[/red]")
        raise typer.Exit(1)

    output = {
        "token": signed.compact_token,
        "headers": compose_auth_headers(signed, ctx.is_oauth2_request),
        "body": signed.canonical_body,
    }
    console.print(json.dumps(output, indent=2), markup=False, highlight=False, soft_wrap=True)


@token_app.command("inspect")
def token_inspect(
    token: str = typer.Argument(..., help="Compact token"),
    body: Optional[Path] = typer.Option(None, "--body", help="Expected JSON request body"),
    public_key: Optional[Path] = typer.Option(None, "--public-key", help="PEM public key to verify the signature"),
    audience: Optional[str] = typer.Option(None, "--audience", help="Expected audience (defaults to the token's aud)"),
):
    """Decode a token and report anything the platform would reject."""
    expected = _read_json(body) if body else None
    try:
        report = inspect_token(token, expected)
    except PaysignError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Token")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for name, value in report.header.items():
        table.add_row(f"header.{name}", str(value))
    for name, value in report.claims.items():
        table.add_row(f"claims.{name}", str(value))
    console.print(table)

    ok = report.valid
    if public_key is not None:
        canonical_body, _ = digest_body(expected) if expected is not None else (None, None)
        try:
            verify_token(
                token,
                _read_text(public_key),
                audience=audience or report.claims.get("aud", ""),
                canonical_body=canonical_body,
            )
            console.print("[green]Signature valid[/green]")
        except PaysignError as e:
            console.print(f"[red]Signature invalid: {e}[/red]")
            ok = False

    if report.issues:
        console.print(Panel("\n".join(f"- {i}" for i in report.issues), title="Issues", style="yellow"))
    if not ok:
        raise typer.Exit(1)
    console.print("[green]No issues found[/green]")
