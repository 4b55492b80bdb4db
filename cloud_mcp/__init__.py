"""cloud-mcp - Model Context Protocol server for the Linode control-plane API."""

__version__ = "0.1.0"
