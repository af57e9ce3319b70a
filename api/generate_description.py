"""Listing description enhancement endpoint.

POST /api/generate_description
{"title": ..., "description": ..., "price": "250.000", "annualRevenue": "480.000", "profitMargin": "25"}
"""

import json
from http.server import BaseHTTPRequestHandler
from pydantic import ValidationError
from b2y.models.description import DescriptionRequest
from b2y.services.description_enhancer import enhance_description
from b2y.utils.http import read_json_body, run_sync, write_json
from b2y.utils.logging import correlation_context, get_structured_logger
from b2y.utils.logging_config import LoggingConfig

LoggingConfig.ensure_configured()
logger = get_structured_logger(__name__)


class handler(BaseHTTPRequestHandler):
    """Vercel serverless function handler for description enhancement."""

    def do_POST(self):
        with correlation_context(self.headers.get("X-Correlation-ID")):
            try:
                # ValueError covers a non-numeric Content-Length
                body = read_json_body(self)
                request = DescriptionRequest.model_validate(body)
            except (json.JSONDecodeError, UnicodeDecodeError, ValidationError, ValueError) as e:
                logger.info("Rejected description request", error=str(e))
                write_json(self, 400, {"message": "Invalid request body."})
                return

            try:
                enhanced = run_sync(enhance_description(request))
            except Exception as e:
                logger.error("Error enhancing listing description", error=str(e), exc_info=True)
                write_json(self, 500, {"message": "Error optimizing listing."})
                return

            write_json(self, 200, enhanced.model_dump())
