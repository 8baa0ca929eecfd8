"""
Command-Line Interface for TSC Network Printers.

Usage:
    tsc status HOST                    - Show basic and extended status
    tsc info HOST                      - Show model name and serial number
    tsc feed HOST                      - Feed one label
    tsc barcode HOST DATA              - Print a single barcode label
    tsc templates -t DIR               - List label templates
    tsc print HOST NAME -t DIR -s k=v  - Print a label from a template
"""

import logging
import re
import sys

import click

from .connection import TCPConnection
from .driver import LabelPrinterDriver
from .printer import (
    ConnectionError,
    FatalError,
    PrinterError,
    PrintError,
    PrintWarning,
    TSCPrinter,
)
from .templates import find_placeholders, load_templates
from .tspl_commands import BarcodeType, Rotation


# RFC 1123 hostname, which also admits dotted IPv4 addresses
HOSTNAME_PATTERN = re.compile(
    r"^(?=.{1,253}$)([A-Za-z0-9]([A-Za-z0-9-]{0,61}[A-Za-z0-9])?)"
    r"(\.[A-Za-z0-9]([A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*$"
)

# key=value pair for --set
SUBSTITUTION_PATTERN = re.compile(r"^([^=]+)=(.*)$", re.DOTALL)


def validate_host(ctx, param, value):
    """Validate a printer hostname or IPv4 address.

    Args:
        ctx: Click context
        param: Click parameter
        value: Host value to validate

    Returns:
        The validated host, lowercased

    Raises:
        click.BadParameter: If the host is not a valid hostname or address
    """
    if value is None:
        return None
    if HOSTNAME_PATTERN.match(value):
        return value.lower()
    raise click.BadParameter(
        f"Invalid printer host: '{value}'. Expected a hostname or IPv4 address"
    )


def parse_substitutions(ctx, param, values):
    """Turn repeated --set key=value options into a dict."""
    substitutions = {}
    for item in values:
        match = SUBSTITUTION_PATTERN.match(item)
        if not match:
            raise click.BadParameter(f"Expected key=value, got '{item}'")
        substitutions[match.group(1).strip()] = match.group(2)
    return substitutions


host_argument = click.argument("host", envvar="TSC_PRINTER_HOST", callback=validate_host)
port_option = click.option(
    "--port",
    "-p",
    type=click.IntRange(1, 65535),
    default=TCPConnection.DEFAULT_PORT,
    envvar="TSC_PRINTER_PORT",
    show_default=True,
    help="Printer raw TCP port",
)
timeout_option = click.option(
    "--timeout",
    type=float,
    default=TCPConnection.DEFAULT_READ_TIMEOUT,
    show_default=True,
    help="Read and write timeout in seconds",
)
templates_option = click.option(
    "--templates",
    "-t",
    "templates_dir",
    type=click.Path(file_okay=False),
    envvar="TSC_TEMPLATES",
    default="templates",
    show_default=True,
    help="Directory with *.tspl label templates",
)


def open_printer(host, port, timeout) -> TSCPrinter:
    """Connect, exiting with status 1 if the printer is unreachable."""
    click.echo(f"Connecting to {host}:{port}...")
    try:
        return TSCPrinter(host, port, read_timeout=timeout, write_timeout=timeout)
    except ConnectionError as e:
        click.echo(f"Connection error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option("--debug/--no-debug", default=False, help="Enable debug output")
def main(debug):
    """TSC Network Label Printer CLI."""
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # basicConfig leaves an already configured root logger alone
    logging.getLogger().setLevel(level)


@main.command()
@host_argument
@port_option
@timeout_option
def status(host, port, timeout):
    """Show printer status."""
    printer = open_printer(host, port, timeout)
    try:
        with printer:
            basic = printer.query_basic_status()
            extended = printer.query_extended_status()
    except PrinterError as e:
        click.echo(f"Printer error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Basic status: 0x{int(basic):02X} {basic.description or 'Ready'}")
    click.echo(f"Status: {extended.status.description}")
    if not extended.is_known:
        click.echo("Status reply was missing or malformed; state is inconclusive")
    click.echo(f"Warnings: {extended.warnings.description or 'none'}")
    click.echo(f"Errors: {extended.errors.description or 'none'}")
    if extended.errors:
        sys.exit(1)


@main.command()
@host_argument
@port_option
@timeout_option
def info(host, port, timeout):
    """Show printer model and serial number."""
    printer = open_printer(host, port, timeout)
    try:
        with printer:
            model = printer.query_model_name()
            serial = printer.query_serial_number()
    except PrinterError as e:
        click.echo(f"Printer error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Model: {model or 'unknown'}")
    click.echo(f"Serial: {serial or 'unknown'}")


@main.command()
@host_argument
@port_option
@timeout_option
def feed(host, port, timeout):
    """Feed one label forward."""
    printer = open_printer(host, port, timeout)
    try:
        with printer:
            printer.form_feed()
    except PrinterError as e:
        click.echo(f"Printer error: {e}", err=True)
        sys.exit(1)
    click.echo("Feed complete!")


@main.command()
@host_argument
@click.argument("data")
@port_option
@timeout_option
@click.option("--width", default=50.0, show_default=True, help="Label width in mm")
@click.option("--height", default=30.0, show_default=True, help="Label height in mm")
@click.option("--gap", default=2.0, show_default=True, help="Gap (or black mark) height in mm")
@click.option("--black-mark", is_flag=True, help="Use black mark instead of gap sensing")
@click.option("--speed", default=4, show_default=True, help="Print speed")
@click.option(
    "--density",
    type=click.IntRange(0, 15),
    default=8,
    show_default=True,
    help="Print density (0-15)",
)
@click.option(
    "--type",
    "barcode_type",
    type=click.Choice([t.value for t in BarcodeType]),
    default=BarcodeType.CODE128.value,
    show_default=True,
    help="Barcode symbology",
)
@click.option("--bar-height", default=80, show_default=True, help="Bar height in dots")
@click.option("--copies", default=1, help="Number of copies")
def barcode(host, data, port, timeout, width, height, gap, black_mark, speed,
            density, barcode_type, bar_height, copies):
    """Print a label with a single barcode."""
    printer = open_printer(host, port, timeout)
    try:
        with printer:
            printer.setup(width, height, speed, density, black_mark, gap, 0)
            printer.clear_buffer()
            printer.draw_barcode(
                20, 20, BarcodeType(barcode_type), bar_height, True,
                Rotation.R0, 2, 2, data,
            )
            printer.print_label(1, copies)
            extended = printer.query_extended_status()
    except PrinterError as e:
        click.echo(f"Printer error: {e}", err=True)
        sys.exit(1)

    if extended.errors:
        click.echo(f"Print error: {extended.errors.description}", err=True)
        sys.exit(1)
    if extended.warnings:
        click.echo(f"Warning: {extended.warnings.description}")
    click.echo("Print complete!")


@main.command()
@templates_option
def templates(templates_dir):
    """List label templates."""
    found = load_templates(templates_dir)
    if not found:
        click.echo(f"No templates found in {templates_dir}")
        return
    for name, text in found.items():
        fields = ", ".join(find_placeholders(text))
        click.echo(f"  {name}" + (f"  [{fields}]" if fields else ""))


@main.command("print")
@host_argument
@click.argument("name")
@port_option
@timeout_option
@templates_option
@click.option(
    "--set",
    "-s",
    "substitutions",
    multiple=True,
    callback=parse_substitutions,
    help="Placeholder value as key=value (repeatable)",
)
@click.option("--check/--no-check", default=True, help="Check printer status before printing")
def print_template(host, name, port, timeout, templates_dir, substitutions, check):
    """Print a label from template NAME."""
    driver = LabelPrinterDriver(
        host,
        port,
        templates=load_templates(templates_dir),
        read_timeout=timeout,
        write_timeout=timeout,
    )

    template = driver.templates.get(name)
    if template is not None:
        missing = [key for key in find_placeholders(template) if key not in substitutions]
        if missing:
            click.echo(f"Warning: no value for {', '.join(missing)}", err=True)

    try:
        if check:
            click.echo(f"Checking printer {host}:{port}...")
            try:
                driver.check_connection()
            except PrintWarning as e:
                click.echo(f"Warning: {e}")
            if driver.model:
                click.echo(f"Printer: TSC-{driver.model}, s/n {driver.serial}")
        click.echo(f"Printing {name}...")
        driver.print_template(name, substitutions)
    except PrintWarning as e:
        click.echo(f"Warning: {e}")
    except FatalError as e:
        click.echo(f"Fatal: {e}", err=True)
        sys.exit(1)
    except PrintError as e:
        click.echo(f"Print error: {e}", err=True)
        sys.exit(1)
    else:
        click.echo("Print complete!")


if __name__ == "__main__":
    main()
