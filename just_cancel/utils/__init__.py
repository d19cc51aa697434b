"""
Utilities Package

Helper modules for the MCP server:
- validators.py: Tool argument validation
- context.py: Client context read from request meta
- formatters.py: Response formatting utilities
"""
