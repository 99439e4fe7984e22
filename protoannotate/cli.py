"""
protoannotate command line

Usage:
    # Annotate a captured payload
    protoannotate payload.bin

    # Annotate a hex string
    protoannotate --hex "08 96 01 12 05 68 65 6c 6c 6f"

    # Read from stdin, write to a file
    cat payload.bin | protoannotate - -o payload.txt
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .annotator import Annotator, AnnotatorOptions
from .wire import DecodeError

app = typer.Typer(help="Annotated hex dump of raw protobuf wire data", add_completion=False)
console = Console(stderr=True)

log = logging.getLogger("protoannotate")


def configure_logging(verbose: bool):
    """Send log records to stderr through rich; stdout carries the dump."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def read_input(file: Optional[Path], hex_input: Optional[str]) -> bytes:
    """Collect the raw bytes from --hex, a file, or stdin."""
    if file is not None and hex_input is not None:
        raise typer.BadParameter("give either FILE or --hex, not both")

    if hex_input is not None:
        try:
            return bytes.fromhex(hex_input)
        except ValueError:
            raise typer.BadParameter(f"not a hex string: {hex_input!r}", param_hint="--hex")

    if file is None or str(file) == "-":
        return typer.get_binary_stream("stdin").read()
    return file.read_bytes()


@app.command()
def main(
    file: Optional[Path] = typer.Argument(
        None,
        help="Binary payload to annotate ('-' or omitted reads stdin)",
        exists=True,
        dir_okay=False,
        readable=True,
        allow_dash=True,
    ),
    hex_input: Optional[str] = typer.Option(
        None, "--hex",
        help="Hex string to annotate instead of a file"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o",
        help="Write the dump here instead of stdout"
    ),
    clamp_depth: bool = typer.Option(
        False, "--clamp-depth",
        envvar="PROTOANNOTATE_CLAMP_DEPTH",
        help="Never let an unmatched End Group push nesting below zero"
    ),
    indent_width: int = typer.Option(
        2, "--indent-width",
        min=0,
        envvar="PROTOANNOTATE_INDENT_WIDTH",
        help="Spaces per group nesting level"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Log each decoded field to stderr"
    ),
):
    """Print every field of a protobuf wire stream as annotated hex."""
    configure_logging(verbose)
    data = read_input(file, hex_input)
    log.debug("read %d bytes", len(data))

    options = AnnotatorOptions(indent_width=indent_width, clamp_depth=clamp_depth)

    if output:
        with open(output, "wb") as sink:
            ok = run(data, sink, options)
    else:
        sink = typer.get_binary_stream("stdout")
        ok = run(data, sink, options)
        sink.flush()

    if not ok:
        raise typer.Exit(code=1)


def run(data: bytes, sink, options: AnnotatorOptions) -> bool:
    """Annotate data into sink, reporting a decode error on stderr."""
    try:
        Annotator(sink, options).annotate(data)
    except DecodeError as e:
        sink.flush()
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return False
    return True
