"""Container engine detection and host readiness checks, served over MCP."""

__version__ = "0.1.0"
