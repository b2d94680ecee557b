"""Azure DevOps platform layer: connection, REST wrappers and operations.

Modules:
- config: settings resolved once at startup
- connection: authenticated, shared HTTP connection
- clients: thin REST API wrappers (core, work items, git, search)
- errors: domain error taxonomy and HTTP failure classification
- schemas: tool argument and code search models
- projects, work_items, repositories, search: operations
- enrichment: parallel file content fetching for search results
"""
