"""Live reverse auction server."""

__version__ = "0.1.0"
