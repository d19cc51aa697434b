"""
Error Taxonomy

Exceptions raised across the Just Cancel server, each convertible to a dict
for MCP error payloads and logs.

Hard errors (fatal to the request):
- UnknownTool: tool name not in the catalog
- InvalidArguments: tool arguments fail the declared input schema
- UnknownResource: resource URI not in the catalog
- UnknownSession: message posted to a session that does not exist

Soft errors (captured into the tool response as ``file_parsing_error``):
- FileFetchError: uploaded statement could not be downloaded
- ExtractionError: text could not be extracted from the statement
"""

from typing import Any

# JSON-RPC error codes used when converting to McpError
INVALID_PARAMS = -32602
RESOURCE_NOT_FOUND = -32002


class JustCancelError(Exception):
    """Base class for all server errors."""

    error_code = "just_cancel_error"
    rpc_code = INVALID_PARAMS

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert error to dict for MCP error responses."""
        return {"error": self.error_code, "message": self.message}


class UnknownTool(JustCancelError):
    """Raised when a tool call names a tool that is not in the catalog."""

    error_code = "unknown_tool"

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(f"Unknown tool: {tool_name}")


class InvalidArguments(JustCancelError, ValueError):
    """Tool arguments failed schema validation."""

    error_code = "validation_error"

    def __init__(
        self,
        message: str,
        field: str | None = None,
        provided_value: Any | None = None,
        expected: str | None = None,
    ):
        self.field = field
        self.provided_value = provided_value
        self.expected = expected
        super().__init__(message)

    def to_dict(self) -> dict:
        result = {"error": self.error_code, "message": self.message}

        if self.field:
            result["field"] = self.field

        if self.provided_value is not None:
            result["provided"] = str(self.provided_value)

        if self.expected:
            result["expected"] = self.expected

        return result


class UnknownResource(JustCancelError, LookupError):
    """Raised when a resource URI is not in the catalog."""

    error_code = "unknown_resource"
    rpc_code = RESOURCE_NOT_FOUND

    def __init__(self, uri: str):
        self.uri = uri
        super().__init__(f"Unknown resource: {uri}")


class UnknownSession(JustCancelError, LookupError):
    """Raised when a message references a session that is not open."""

    error_code = "unknown_session"

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Unknown session: {session_id}")


class FileFetchError(JustCancelError):
    """Statement file could not be downloaded."""

    error_code = "file_fetch_error"

    def __init__(self, message: str, status_code: int | None = None, url: str | None = None):
        self.status_code = status_code
        self.url = url
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "error": self.error_code,
            "message": self.message,
            "status_code": self.status_code,
            "retry": self.status_code in [408, 429, 500, 502, 503, 504]
            if self.status_code
            else False,
        }


class ExtractionError(JustCancelError):
    """Text could not be extracted from a statement file."""

    error_code = "extraction_error"
