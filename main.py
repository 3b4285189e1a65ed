"""
aqs-mcp - MCP Server for the EPA Air Quality System (AQS) Data API
"""

from aqsmcp.server import main

if __name__ == "__main__":
    main()
