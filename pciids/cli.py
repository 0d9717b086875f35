"""CLI entry point for pciids."""

import json
import logging
from typing import Annotated

import requests
import typer
from rich.console import Console
from rich.markup import escape

from pciids.core.database import PciIdsDatabase
from pciids.core.exceptions import PciIdsError
from pciids.core.models import (
    CLASS_ID_WIDTH,
    VENDOR_ID_WIDTH,
    Device,
    DeviceClass,
    DeviceSubclass,
    ProgramInterface,
    Subsystem,
    Vendor,
    canonical_id,
)
from pciids.core.sources import SOURCE_ENV_VAR

app = typer.Typer(
    name="pciids",
    help="Look up PCI vendors, devices and device classes in the pci.ids database.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def _vendor_id(value: str | None) -> str | None:
    if value is None:
        return None
    try:
        return canonical_id(value, VENDOR_ID_WIDTH)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


def _class_id(value: str) -> str:
    try:
        return canonical_id(value, CLASS_ID_WIDTH)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


SourceOption = Annotated[
    str | None,
    typer.Option(
        "--source",
        "-s",
        envvar=SOURCE_ENV_VAR,
        help="Path or URL of the pci.ids file (default: system copy, then pci-ids.ucw.cz)",
    ),
]
JsonOption = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")]
VendorArg = Annotated[str, typer.Argument(help="Vendor ID (4 hex digits)", callback=_vendor_id)]
DeviceArg = Annotated[str, typer.Argument(help="Device ID (4 hex digits)", callback=_vendor_id)]
ClassArg = Annotated[str, typer.Argument(help="Class ID (2 hex digits)", callback=_class_id)]
SubclassArg = Annotated[
    str, typer.Argument(help="Subclass ID (2 hex digits)", callback=_class_id)
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    """Look up PCI vendors, devices and device classes."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def get_database(source: str | None) -> PciIdsDatabase:
    """Load a database from the given (or default) source, exiting on failure."""
    db = PciIdsDatabase()
    try:
        db.load(source)
    except (PciIdsError, OSError, requests.RequestException) as e:
        err_console.print(f"[red]Cannot load pci.ids: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e
    return db


def vendor_to_dict(vendor: Vendor) -> dict[str, object]:
    """Convert a vendor to a JSON-friendly dict."""
    return {"id": vendor.id, "name": vendor.name, "devices": len(vendor.devices)}


def device_to_dict(device: Device) -> dict[str, object]:
    """Convert a device to a JSON-friendly dict."""
    return {
        "id": device.id,
        "name": device.name,
        "vendor_id": device.vendor_id,
        "subsystems": len(device.subsystems),
    }


def subsystem_to_dict(subsystem: Subsystem) -> dict[str, object]:
    """Convert a subsystem to a JSON-friendly dict."""
    return {
        "subvendor_id": subsystem.subvendor_id,
        "subdevice_id": subsystem.subdevice_id,
        "name": subsystem.name,
    }


def class_to_dict(device_class: DeviceClass) -> dict[str, object]:
    """Convert a device class to a JSON-friendly dict."""
    return {
        "id": device_class.id,
        "name": device_class.name,
        "subclasses": len(device_class.subclasses),
    }


def subclass_to_dict(subclass: DeviceSubclass) -> dict[str, object]:
    """Convert a device subclass to a JSON-friendly dict."""
    return {
        "id": subclass.id,
        "name": subclass.name,
        "class_id": subclass.class_id,
        "program_interfaces": len(subclass.program_interfaces),
    }


def prog_if_to_dict(prog_if: ProgramInterface) -> dict[str, object]:
    """Convert a programming interface to a JSON-friendly dict."""
    return {"id": prog_if.id, "name": prog_if.name}


@app.command()
def stats(source: SourceOption = None, output_json: JsonOption = False) -> None:
    """Show database statistics."""
    db = get_database(source)
    result = db.get_stats()

    if output_json:
        print(json.dumps(result))
    else:
        console.print(f"Vendors: {result['vendors']}")
        console.print(f"Devices: {result['devices']}")
        console.print(f"Subsystems: {result['subsystems']}")
        console.print(f"Classes: {result['classes']}")
        console.print(f"Subclasses: {result['subclasses']}")
        console.print(f"Programming interfaces: {result['program_interfaces']}")


@app.command()
def vendors(source: SourceOption = None, output_json: JsonOption = False) -> None:
    """List all vendors."""
    db = get_database(source)
    vendor_list = db.find_all_vendors()

    if output_json:
        print(json.dumps([vendor_to_dict(v) for v in vendor_list]))
    else:
        for vendor in vendor_list:
            console.print(f"[cyan]{vendor.id}[/cyan]  {escape(vendor.name)}", highlight=False)


@app.command()
def vendor(
    vendor_id: VendorArg,
    source: SourceOption = None,
    output_json: JsonOption = False,
) -> None:
    """Show a vendor and its devices."""
    db = get_database(source)
    found = db.find_vendor(vendor_id)

    if output_json:
        result = None
        if found:
            result = {
                **vendor_to_dict(found),
                "devices": [device_to_dict(d) for d in db.find_all_devices(vendor_id)],
            }
        print(json.dumps(result))
        return

    if found is None:
        console.print(f"No match for vendor '[cyan]{vendor_id}[/cyan]'")
        return
    console.print(f"[bold cyan]{found.id}[/]  {escape(found.name)}", highlight=False)
    for device in db.find_all_devices(vendor_id):
        console.print(f"  [cyan]{device.id}[/cyan]  {escape(device.name)}", highlight=False)


@app.command()
def devices(
    vendor_id: VendorArg,
    source: SourceOption = None,
    output_json: JsonOption = False,
) -> None:
    """List the devices of a vendor."""
    db = get_database(source)
    device_list = db.find_all_devices(vendor_id)

    if output_json:
        print(json.dumps([device_to_dict(d) for d in device_list]))
    else:
        if not device_list:
            console.print(f"No devices for vendor '[cyan]{vendor_id}[/cyan]'")
            return
        for device in device_list:
            console.print(f"[cyan]{device.id}[/cyan]  {escape(device.name)}", highlight=False)


@app.command()
def device(
    vendor_id: VendorArg,
    device_id: DeviceArg,
    source: SourceOption = None,
    output_json: JsonOption = False,
) -> None:
    """Show a device and its subsystems."""
    db = get_database(source)
    found = db.find_device(vendor_id, device_id)

    if output_json:
        result = None
        if found:
            result = {
                **device_to_dict(found),
                "subsystems": [
                    subsystem_to_dict(s) for s in db.find_all_subsystems(vendor_id, device_id)
                ],
            }
        print(json.dumps(result))
        return

    if found is None:
        console.print(f"No match for device '[cyan]{vendor_id}:{device_id}[/cyan]'")
        return
    owner = db.find_vendor(vendor_id)
    owner_name = owner.name if owner else vendor_id
    console.print(
        f"[bold cyan]{found.vendor_id}:{found.id}[/]  {escape(found.name)}", highlight=False
    )
    console.print(f"  [dim]{escape(owner_name)}[/]", highlight=False)
    for subsystem in db.find_all_subsystems(vendor_id, device_id):
        console.print(
            f"  [cyan]{subsystem.subvendor_id}:{subsystem.subdevice_id}[/cyan]  {escape(subsystem.name)}",
            highlight=False,
        )


@app.command()
def subsystems(
    vendor_id: VendorArg,
    device_id: DeviceArg,
    subvendor: Annotated[
        str | None,
        typer.Option("--subvendor", help="Only subsystems of this subvendor", callback=_vendor_id),
    ] = None,
    source: SourceOption = None,
    output_json: JsonOption = False,
) -> None:
    """List the subsystems of a device."""
    db = get_database(source)
    subsystem_list = db.find_all_subsystems(vendor_id, device_id, subvendor)

    if output_json:
        print(json.dumps([subsystem_to_dict(s) for s in subsystem_list]))
    else:
        if not subsystem_list:
            console.print(f"No subsystems for device '[cyan]{vendor_id}:{device_id}[/cyan]'")
            return
        for subsystem in subsystem_list:
            console.print(
                f"[cyan]{subsystem.subvendor_id}:{subsystem.subdevice_id}[/cyan]  {escape(subsystem.name)}",
                highlight=False,
            )


@app.command()
def classes(source: SourceOption = None, output_json: JsonOption = False) -> None:
    """List all device classes."""
    db = get_database(source)
    class_list = db.find_all_device_classes()

    if output_json:
        print(json.dumps([class_to_dict(c) for c in class_list]))
    else:
        for device_class in class_list:
            console.print(
                f"[cyan]{device_class.id}[/cyan]  {escape(device_class.name)}", highlight=False
            )


@app.command()
def subclasses(
    class_id: ClassArg,
    source: SourceOption = None,
    output_json: JsonOption = False,
) -> None:
    """List the subclasses of a device class."""
    db = get_database(source)
    subclass_list = db.find_all_device_subclasses(class_id)

    if output_json:
        print(json.dumps([subclass_to_dict(s) for s in subclass_list]))
    else:
        if not subclass_list:
            console.print(f"No subclasses for class '[cyan]{class_id}[/cyan]'")
            return
        for subclass in subclass_list:
            console.print(f"[cyan]{subclass.id}[/cyan]  {escape(subclass.name)}", highlight=False)


@app.command()
def progifs(
    class_id: ClassArg,
    subclass_id: SubclassArg,
    source: SourceOption = None,
    output_json: JsonOption = False,
) -> None:
    """List the programming interfaces of a device subclass."""
    db = get_database(source)
    prog_if_list = db.find_all_program_interfaces(class_id, subclass_id)

    if output_json:
        print(json.dumps([prog_if_to_dict(p) for p in prog_if_list]))
    else:
        if not prog_if_list:
            console.print(
                f"No programming interfaces for subclass '[cyan]{class_id}:{subclass_id}[/cyan]'"
            )
            return
        for prog_if in prog_if_list:
            console.print(f"[cyan]{prog_if.id}[/cyan]  {escape(prog_if.name)}", highlight=False)


if __name__ == "__main__":
    app()
