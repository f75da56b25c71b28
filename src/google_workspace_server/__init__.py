"""Google Workspace Server.

Exposes Gmail and Calendar operations as MCP tools over stdio and as a
small REST shim over HTTP.
"""

from google_workspace_server.__version__ import __version__

__all__ = ["__version__"]
