"""MCP server for pciids - PCI vendor, device and class lookups."""

from pciids.mcp import serve


def main() -> None:
    """Entry point for mcp-server-pciids."""
    serve()


__all__ = ["main", "serve"]
