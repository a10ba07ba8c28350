"""Sales CRM metrics API."""

__version__ = "0.1.0"
