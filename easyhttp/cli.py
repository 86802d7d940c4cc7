"""CLI application and commands for ehttp."""

from __future__ import annotations

import asyncio
import io
import json
import logging
import sys
from contextlib import ExitStack
from importlib.metadata import version
from pathlib import Path
from typing import Annotated, Any

import httpx
import typer
from pydantic import RootModel
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from easyhttp.config import CONFIG_FILE, TLSConfig, client_from_config, load_config, load_tls_config, save_config
from easyhttp.context import Context
from easyhttp.errors import ClientError
from easyhttp.request import (
    Method,
    RequestOption,
    with_header,
    with_json_body,
    with_json_response,
    with_param,
    with_response,
)


def _version_callback(value: bool) -> None:
    if value:
        print(f"ehttp {version('easyhttp')}")
        raise typer.Exit


app = typer.Typer(
    name="ehttp",
    help="Issue HTTP requests with params, headers and JSON bodies.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


@app.callback()
def _main(
    _version: Annotated[
        bool,
        typer.Option("--version", "-V", callback=_version_callback, is_eager=True, help="Show version and exit."),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log requests to stderr.")] = False,
) -> None:
    """Issue HTTP requests with params, headers and JSON bodies."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )


def _split_pairs(values: list[str] | None, sep: str, what: str) -> list[tuple[str, str]]:
    pairs = []
    for raw in values or []:
        key, found, value = raw.partition(sep)
        if not found or not key.strip():
            raise typer.BadParameter(f"expected {what} as 'name{sep}value', got {raw!r}")
        pairs.append((key.strip(), value.strip() if sep == ":" else value))
    return pairs


def _tls_from_options(ca_file: Path | None, cert: Path | None, key: Path | None, insecure: bool) -> TLSConfig | None:
    if not (ca_file or cert or key or insecure):
        return None
    base = load_tls_config() or TLSConfig()
    return TLSConfig(
        ca_file=str(ca_file) if ca_file else base.ca_file,
        ca_dir=base.ca_dir,
        cert_file=str(cert) if cert else base.cert_file,
        key_file=str(key) if key else base.key_file,
        verify=base.verify and not insecure,
    )


async def _execute(
    method: Method, url: str, options: list[RequestOption], timeout: float | None, tls: TLSConfig | None
) -> None:
    root = Context.background()
    with root.with_timeout(timeout) if timeout is not None else root.with_cancel() as ctx:
        async with client_from_config(tls) as c:
            await c.execute(ctx, method, url, *options)


def _run(
    method: Method,
    url: str,
    *,
    params: list[str] | None,
    headers: list[str] | None,
    body: Any,
    output: Path | None,
    json_output: bool,
    timeout: float | None,
    tls: TLSConfig | None,
) -> None:
    options: list[RequestOption] = [with_param(k, v) for k, v in _split_pairs(params, "=", "param")]
    options += [with_header(k, v) for k, v in _split_pairs(headers, ":", "header")]
    if body is not None:
        options.append(with_json_body(body))

    doc = RootModel[Any](None)
    buf = io.BytesIO()
    with ExitStack() as stack:
        if output:
            options.append(with_response(stack.enter_context(output.open("wb"))))
        elif json_output:
            options.append(with_json_response(doc))
        else:
            options.append(with_response(buf))

        try:
            asyncio.run(_execute(method, url, options, timeout, tls))
        except (ClientError, httpx.HTTPError) as e:
            err_console.print(f"[red]Error: {escape(str(e) or type(e).__name__)}[/red]")
            raise typer.Exit(1) from e

    if output:
        err_console.print(f"[green]Saved:[/green] {output}")
    elif json_output:
        console.print_json(data=doc.root)
    else:
        sys.stdout.write(buf.getvalue().decode(errors="replace"))
        sys.stdout.flush()


ParamOpt = Annotated[list[str] | None, typer.Option("--param", "-p", help="Query parameter as name=value (repeatable)")]
HeaderOpt = Annotated[list[str] | None, typer.Option("--header", "-H", help="Header as 'Name: value' (repeatable)")]
OutputOpt = Annotated[Path | None, typer.Option("--output", "-o", help="Write the response body to this file")]
JsonOpt = Annotated[bool, typer.Option("--json", "-j", help="Decode and pretty-print a JSON response")]
TimeoutOpt = Annotated[float | None, typer.Option("--timeout", "-t", help="Abandon the request after N seconds")]
CaFileOpt = Annotated[Path | None, typer.Option("--ca-file", help="CA bundle to verify the server with")]
CertOpt = Annotated[Path | None, typer.Option("--cert", help="Client certificate (PEM)")]
KeyOpt = Annotated[Path | None, typer.Option("--key", help="Client certificate key (PEM)")]
InsecureOpt = Annotated[bool, typer.Option("--insecure", "-k", help="Skip server certificate verification")]


@app.command()
def get(
    url: Annotated[str, typer.Argument(help="Request URL")],
    param: ParamOpt = None,
    header: HeaderOpt = None,
    output: OutputOpt = None,
    json_output: JsonOpt = False,
    timeout: TimeoutOpt = None,
    ca_file: CaFileOpt = None,
    cert: CertOpt = None,
    key: KeyOpt = None,
    insecure: InsecureOpt = False,
) -> None:
    """Send a GET request.

    Examples:
        ehttp get https://example.com -p debug=1
        ehttp get https://api.example.com/me -H "Authorization: Bearer x" -j
    """
    _run(
        Method.GET,
        url,
        params=param,
        headers=header,
        body=None,
        output=output,
        json_output=json_output,
        timeout=timeout,
        tls=_tls_from_options(ca_file, cert, key, insecure),
    )


@app.command()
def post(
    url: Annotated[str, typer.Argument(help="Request URL")],
    data: Annotated[str | None, typer.Option("--data", "-d", help="JSON request body")] = None,
    data_file: Annotated[Path | None, typer.Option("--data-file", help="JSON request body file")] = None,
    param: ParamOpt = None,
    header: HeaderOpt = None,
    output: OutputOpt = None,
    json_output: JsonOpt = False,
    timeout: TimeoutOpt = None,
    ca_file: CaFileOpt = None,
    cert: CertOpt = None,
    key: KeyOpt = None,
    insecure: InsecureOpt = False,
) -> None:
    """Send a POST request, optionally with a JSON body."""
    if data is not None and data_file is not None:
        err_console.print("[red]Error: Use either --data or --data-file, not both[/red]")
        raise typer.Exit(1)
    raw = data_file.read_text() if data_file else data
    body = None
    if raw is not None:
        try:
            body = json.loads(raw)
        except json.JSONDecodeError as e:
            err_console.print(f"[red]Error: Request body is not valid JSON: {escape(str(e))}[/red]")
            raise typer.Exit(1) from e
    _run(
        Method.POST,
        url,
        params=param,
        headers=header,
        body=body,
        output=output,
        json_output=json_output,
        timeout=timeout,
        tls=_tls_from_options(ca_file, cert, key, insecure),
    )


@app.command("config")
def config_cmd(
    ca_file: Annotated[str | None, typer.Option("--ca-file", help="Store a CA bundle path")] = None,
    ca_dir: Annotated[str | None, typer.Option("--ca-dir", help="Store a CA directory path")] = None,
    cert: Annotated[str | None, typer.Option("--cert", help="Store a client certificate path")] = None,
    key: Annotated[str | None, typer.Option("--key", help="Store a client key path")] = None,
    verify: Annotated[bool | None, typer.Option("--verify/--no-verify", help="Store server verification")] = None,
) -> None:
    """Show or update TLS settings in the config file."""
    updates = {"ca_file": ca_file, "ca_dir": ca_dir, "cert_file": cert, "key_file": key, "verify": verify}
    updates = {k: v for k, v in updates.items() if v is not None}

    if not updates:
        tls = load_tls_config()
        console.print_json(data={"config_file": str(CONFIG_FILE), "tls": tls.to_dict() if tls else None})
        return

    config = load_config()
    section = config.get("tls")
    if not isinstance(section, dict):
        section = {}
    section.update(updates)
    config["tls"] = section
    save_config(config)
    console.print(f"[green]Saved:[/green] {CONFIG_FILE}")


def main() -> int:
    """Main entry point."""
    app()
    return 0


if __name__ == "__main__":
    sys.exit(main())
