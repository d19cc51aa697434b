"""
Just Cancel

MCP server that detects recurring subscriptions in bank statement text and
helps users decide which ones to cancel.
"""

__version__ = "0.1.0"
