"""FastAPI routers for the worker.

Routers are grouped by domain (analysis parsing, meeting reconciliation).
"""

from fastapi import HTTPException, Request


def check_payload_size(request: Request) -> None:
    """Reject bodies larger than Settings.max_payload_bytes before parsing them."""
    limit = request.app.state.settings.max_payload_bytes
    length = request.headers.get("content-length")
    if length and length.isdigit() and int(length) > limit:
        raise HTTPException(status_code=413, detail=f"Payload exceeds {limit} bytes")
