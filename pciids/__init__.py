"""
pciids: Query the PCI ID repository (pci.ids) in memory.

pciids parses the pci.ids text database into two hierarchies:
- Vendors, their devices and device subsystems
- Device classes, their subclasses and programming interfaces

Usage:
    from pciids.core.database import PciIdsDatabase

    db = PciIdsDatabase()
    db.load_file("/usr/share/hwdata/pci.ids")
    vendor = db.find_vendor("8086")
    for device in db.find_all_devices("8086"):
        print(device.id, device.name)
"""

__version__ = "0.1.0"
