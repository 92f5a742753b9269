"""gamewatch: release intelligence and scheduling engine for a self-hosted game library."""

__version__ = "0.4.0"
