# pydd/cli.py
from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Optional, Tuple

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import AppConfig, ConfigError, load_config, parse_version_spec
from .tools.base import ToolError
from .tools.dd import Dd

app = typer.Typer(help="Configure and run dd from the command line.")

_console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load(config_file: Optional[Path]) -> AppConfig:
    try:
        return load_config(config_file)
    except ConfigError as e:
        typer.echo(f"[!] Config error: {e}")
        raise typer.Exit(code=1)


def _resolve_min_version(
    min_version: Optional[str], cfg: AppConfig
) -> Optional[Tuple[int, int]]:
    if min_version is None:
        return cfg.required_version
    try:
        return parse_version_spec(min_version)
    except ConfigError as e:
        raise typer.BadParameter(str(e), param_hint="--min-version")


def _build_dd(binary: Optional[str], min_version: Optional[Tuple[int, int]], cfg: AppConfig) -> Dd:
    dd = Dd(binary or cfg.dd_binary)
    if min_version is not None:
        dd.min_version(*min_version)
    return dd


@app.command()
def check(
    binary: Optional[str] = typer.Option(
        None, "--binary", "-b", help="dd executable to use (default from config or 'dd')."
    ),
    min_version: Optional[str] = typer.Option(
        None, "--min-version", help="Minimum acceptable version, e.g. 8.32."
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", exists=True, readable=True, help="JSON config file."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every command run."),
) -> None:
    """
    Verify the dd binary can be launched and meets the minimum version.
    """
    _setup_logging(verbose)
    cfg = _load(config_file)
    required = _resolve_min_version(min_version, cfg)
    dd = _build_dd(binary, required, cfg)

    try:
        version = dd.check()
    except ToolError as e:
        typer.echo(f"[!] {e}")
        raise typer.Exit(code=1)

    table = Table(title="dd check")
    table.add_column("Binary", style="bright_green", overflow="fold")
    table.add_column("Version", style="white", no_wrap=True)
    table.add_column("Minimum", style="dim", no_wrap=True)
    table.add_row(
        dd.binary,
        str(version),
        "{}.{}".format(*required) if required else "-",
    )
    _console.print(table)


@app.command()
def copy(
    input_path: str = typer.Option(..., "--input", "-i", help="Input file or device (if=)."),
    output_path: Optional[str] = typer.Option(
        None, "--output", "-o", help="Output file or device (of=). Defaults to stdout."
    ),
    bs: Optional[str] = typer.Option(None, "--bs", help="Block size, e.g. 4M."),
    ibs: Optional[str] = typer.Option(None, "--ibs", help="Input block size."),
    obs: Optional[str] = typer.Option(None, "--obs", help="Output block size."),
    cbs: Optional[str] = typer.Option(None, "--cbs", help="Conversion block size."),
    count: Optional[int] = typer.Option(None, "--count", min=0, help="Number of input blocks."),
    seek: Optional[int] = typer.Option(None, "--seek", min=0, help="Output blocks to skip."),
    skip: Optional[int] = typer.Option(None, "--skip", min=0, help="Input blocks to skip."),
    status: Optional[str] = typer.Option(
        None, "--status", help="none, noxfer or progress (default from config)."
    ),
    conv: Optional[str] = typer.Option(None, "--conv", help="Conversion flags."),
    iflag: Optional[str] = typer.Option(None, "--iflag", help="Input flags."),
    oflag: Optional[str] = typer.Option(None, "--oflag", help="Output flags."),
    binary: Optional[str] = typer.Option(
        None, "--binary", "-b", help="dd executable to use (default from config or 'dd')."
    ),
    min_version: Optional[str] = typer.Option(
        None, "--min-version", help="Minimum acceptable version, e.g. 8.32."
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", exists=True, readable=True, help="JSON config file."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Print the dd command line instead of running it."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every command run."),
) -> None:
    """
    Copy data with dd. The binary is checked before the copy is started.
    """
    _setup_logging(verbose)
    cfg = _load(config_file)
    dd = _build_dd(binary, _resolve_min_version(min_version, cfg), cfg)

    dd.input(input_path)
    if output_path is not None:
        dd.output(output_path)

    # ---- options, in dd's documented order --------------------------------
    for setter, value in (
        (dd.bs, bs),
        (dd.ibs, ibs),
        (dd.obs, obs),
        (dd.cbs, cbs),
        (dd.count, count),
        (dd.seek, seek),
        (dd.skip, skip),
        (dd.status, status if status is not None else cfg.status),
        (dd.conv, conv),
        (dd.iflag, iflag),
        (dd.oflag, oflag),
    ):
        if value is not None:
            setter(value)

    if dry_run:
        typer.echo(shlex.join([dd.binary, *dd.args()]))
        return

    try:
        out = dd.spawn()
    except ToolError as e:
        typer.echo(f"[!] {e}")
        raise typer.Exit(code=1)

    if out:
        typer.echo(out, nl=False)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
