"""Azure DevOps MCP Server - Model Context Protocol integration.

This package exposes an Azure DevOps organization to AI assistants as a set
of MCP tools.

Modules:
- server: stdio MCP server implementation
- dispatcher: tool call dispatch and error translation
- tools: tool registry (name -> argument schema + handler)
- handlers: tool implementation handlers
- formatters: response formatting utilities
"""

__version__ = "0.1.8"

from . import formatters
from . import tools
from . import handlers
from . import dispatcher

__all__ = ["formatters", "tools", "handlers", "dispatcher", "__version__"]
