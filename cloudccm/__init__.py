"""Shared cloud controller manager resources, manifest templating and cloud-config transformation."""

__version__ = "0.1.0"