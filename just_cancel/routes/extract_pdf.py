"""
PDF text extraction endpoint

Lets the widget extract text from a statement PDF the user picked locally.
"""

import base64
import binascii
from json import JSONDecodeError

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from ..errors import ExtractionError
from ..logging_config import get_logger

logger = get_logger(__name__)


async def extract_pdf(request: Request):
    """
    Extract text from a base64-encoded PDF.

    Request body:
        base64 (str): PDF bytes, base64 encoded

    Returns:
        200: {"text": "..."}
        400: Missing or undecodable payload
        500: {"error": "..."} when extraction fails
    """
    try:
        body = await request.json()
    except (JSONDecodeError, UnicodeDecodeError):
        return JSONResponse({"error": "Invalid JSON body"}, status_code=400)

    encoded = body.get("base64") if isinstance(body, dict) else None
    if not encoded or not isinstance(encoded, str):
        return JSONResponse({"error": "Missing base64 PDF data"}, status_code=400)

    try:
        pdf_bytes = base64.b64decode(encoded, validate=True)
    except binascii.Error:
        return JSONResponse({"error": "Invalid base64 PDF data"}, status_code=400)

    try:
        text = await request.app.state.extractor.extract_text(pdf_bytes)
    except ExtractionError as e:
        logger.error(f"PDF extraction failed: {e.message}")
        return JSONResponse({"error": e.message}, status_code=500)

    return JSONResponse({"text": text})


routes = [
    Route("/api/extract-pdf", extract_pdf, methods=["POST"]),
]
