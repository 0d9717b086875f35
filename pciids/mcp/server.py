"""MCP server implementation for pciids."""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from typing import Any

import requests
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from pciids.core.database import PciIdsDatabase
from pciids.core.exceptions import PciIdsError
from pciids.core.models import CLASS_ID_WIDTH, VENDOR_ID_WIDTH, canonical_id

logger = logging.getLogger(__name__)

server = Server("pciids")

_database = PciIdsDatabase()
_load_lock = threading.Lock()


def _get_database() -> PciIdsDatabase:
    """Get the process-wide database, loading it on first use."""
    if not _database.ready:
        with _load_lock:
            if not _database.ready:
                _database.load()
    return _database


def _subsystem_to_dict(subsystem: Any) -> dict[str, Any]:
    return {
        "subvendor_id": subsystem.subvendor_id,
        "subdevice_id": subsystem.subdevice_id,
        "name": subsystem.name,
    }


@server.list_tools()  # type: ignore[no-untyped-call, untyped-decorator]
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="pciids_vendor",
            description=(
                "Look up a PCI vendor by its 4-digit hex ID. "
                "Returns the vendor name and its devices."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "vendor_id": {
                        "type": "string",
                        "description": "PCI vendor ID, e.g. '8086'",
                    },
                },
                "required": ["vendor_id"],
            },
        ),
        Tool(
            name="pciids_device",
            description=(
                "Look up a PCI device by vendor and device ID. "
                "Returns the device name and its subsystems, optionally only those of one "
                "subvendor."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "vendor_id": {
                        "type": "string",
                        "description": "PCI vendor ID, e.g. '8086'",
                    },
                    "device_id": {
                        "type": "string",
                        "description": "PCI device ID, e.g. '1237'",
                    },
                    "subvendor_id": {
                        "type": "string",
                        "description": "Only return subsystems of this subvendor (optional)",
                    },
                },
                "required": ["vendor_id", "device_id"],
            },
        ),
        Tool(
            name="pciids_class",
            description=(
                "Look up a PCI device class, optionally narrowed to a subclass. "
                "Returns subclasses, or programming interfaces when a subclass is given."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "class_id": {
                        "type": "string",
                        "description": "PCI class ID, e.g. '01'",
                    },
                    "subclass_id": {
                        "type": "string",
                        "description": "PCI subclass ID, e.g. '06' (optional)",
                    },
                },
                "required": ["class_id"],
            },
        ),
        Tool(
            name="pciids_stats",
            description="Get entity counts of the loaded pci.ids database.",
            inputSchema={
                "type": "object",
                "properties": {},
            },
        ),
    ]


@server.call_tool()  # type: ignore[untyped-decorator]
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls in a worker thread, off the event loop."""
    try:
        result = await asyncio.to_thread(_dispatch, name, arguments)
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    except (PciIdsError, ValueError, OSError, requests.RequestException) as e:
        logger.warning(f"Tool {name} failed: {e}")
        return [TextContent(type="text", text=json.dumps({"error": str(e)}))]


def _dispatch(name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    if name == "pciids_vendor":
        return _handle_vendor(arguments["vendor_id"])
    if name == "pciids_device":
        return _handle_device(
            arguments["vendor_id"],
            arguments["device_id"],
            arguments.get("subvendor_id"),
        )
    if name == "pciids_class":
        return _handle_class(
            arguments["class_id"],
            arguments.get("subclass_id"),
        )
    if name == "pciids_stats":
        return _handle_stats()
    return {"error": f"Unknown tool: {name}"}


def _handle_vendor(vendor_id: str) -> dict[str, Any]:
    """Handle pciids_vendor tool."""
    vendor_id = canonical_id(vendor_id, VENDOR_ID_WIDTH)
    db = _get_database()
    vendor = db.find_vendor(vendor_id)

    if vendor is None:
        return {"error": f"No vendor found with ID '{vendor_id}'"}

    return {
        "id": vendor.id,
        "name": vendor.name,
        "devices": [{"id": d.id, "name": d.name} for d in db.find_all_devices(vendor_id)],
    }


def _handle_device(vendor_id: str, device_id: str, subvendor_id: str | None) -> dict[str, Any]:
    """Handle pciids_device tool."""
    vendor_id = canonical_id(vendor_id, VENDOR_ID_WIDTH)
    device_id = canonical_id(device_id, VENDOR_ID_WIDTH)
    if subvendor_id is not None:
        subvendor_id = canonical_id(subvendor_id, VENDOR_ID_WIDTH)

    db = _get_database()
    device = db.find_device(vendor_id, device_id)

    if device is None:
        return {"error": f"No device found with ID '{vendor_id}:{device_id}'"}

    vendor = db.find_vendor(vendor_id)
    return {
        "id": device.id,
        "name": device.name,
        "vendor": {"id": vendor_id, "name": vendor.name if vendor else None},
        "subsystems": [
            _subsystem_to_dict(s) for s in db.find_all_subsystems(vendor_id, device_id, subvendor_id)
        ],
    }


def _handle_class(class_id: str, subclass_id: str | None) -> dict[str, Any]:
    """Handle pciids_class tool."""
    class_id = canonical_id(class_id, CLASS_ID_WIDTH)
    db = _get_database()
    device_class = db.find_device_class(class_id)

    if device_class is None:
        return {"error": f"No device class found with ID '{class_id}'"}

    if subclass_id is None:
        return {
            "id": device_class.id,
            "name": device_class.name,
            "subclasses": [
                {"id": s.id, "name": s.name} for s in db.find_all_device_subclasses(class_id)
            ],
        }

    subclass_id = canonical_id(subclass_id, CLASS_ID_WIDTH)
    subclass = db.find_device_subclass(class_id, subclass_id)
    if subclass is None:
        return {"error": f"No subclass found with ID '{class_id}:{subclass_id}'"}

    return {
        "id": subclass.id,
        "name": subclass.name,
        "class": {"id": device_class.id, "name": device_class.name},
        "program_interfaces": [
            {"id": p.id, "name": p.name}
            for p in db.find_all_program_interfaces(class_id, subclass_id)
        ],
    }


def _handle_stats() -> dict[str, Any]:
    """Handle pciids_stats tool."""
    return _get_database().get_stats()


async def serve() -> None:
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
