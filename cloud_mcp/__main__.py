"""Allow ``python -m cloud_mcp``."""

from cloud_mcp.server import main

main()
