"""Tool error taxonomy.

Every subclass carries a message that is safe to hand back to the MCP client
verbatim; the service layer renders them as ordinary text responses.
"""


class ToolError(Exception):
    """Terminal failure of a tool call with a client-facing message."""


class InputError(ToolError):
    """Missing or malformed argument (bad URL, unsupported scheme)."""


class UpstreamError(ToolError):
    """Search backend or origin server answered with a failure status."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class ContentError(ToolError):
    """Response content cannot be turned into readable text."""
