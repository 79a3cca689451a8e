"""Stock Audit MCP Server."""

import os


def get_server_version() -> str:
    """Get version with fallback for dev mode."""
    if version := os.environ.get("SERVER_VERSION"):
        return version
    try:
        from importlib.metadata import version as pkg_version

        return pkg_version("stock-audit")
    except Exception:
        return "dev"


SERVER_VERSION = get_server_version()
# Bump when output schema changes materially (new fields, renamed fields, structure changes)
# v1: Initial schema (score, verdict, firewall, red_flags, fair_value)
# v2: Added score_breakdown, trade levels (entry/exit/stop), results_digest summary
SCHEMA_VERSION = "2"
