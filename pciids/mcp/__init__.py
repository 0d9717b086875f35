"""
MCP server for pciids.

Exposes pci.ids lookups to LLMs via the Model Context Protocol.

Tools:
    - pciids_vendor: Look up a vendor and its devices
    - pciids_device: Look up a device and its subsystems
    - pciids_class: Look up a device class, subclass and programming interfaces
    - pciids_stats: Get database statistics

The database is loaded from $PCIIDS_SOURCE, a system pci.ids file, or
pci-ids.ucw.cz, in that order.

Usage:
    Install: pip install mcp-server-pciids
    Run: mcp-server-pciids
"""

import asyncio

from pciids.mcp.server import serve as _serve


def serve() -> None:
    """Entry point for the MCP server."""
    asyncio.run(_serve())


__all__ = ["serve"]
