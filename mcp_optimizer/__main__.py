"""Allow ``python -m mcp_optimizer``."""

from mcp_optimizer.cli import main

main()
