"""HTTP API for the Linkup application."""
