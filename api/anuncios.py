"""Listing search endpoint.

GET /api/anuncios?setores=Tecnologia,Varejo&valor_max=2000000&localidades=barueri,cotia
"""

from http.server import BaseHTTPRequestHandler
from pydantic import ValidationError
from b2y.services.listing_search import ListingFilters, search_listings
from b2y.utils.errors import SupabaseError
from b2y.utils.http import query_params, run_sync, write_json
from b2y.utils.logging import correlation_context, get_structured_logger
from b2y.utils.logging_config import LoggingConfig

LoggingConfig.ensure_configured()
logger = get_structured_logger(__name__)


class handler(BaseHTTPRequestHandler):
    """Vercel serverless function handler for listing search."""

    def do_GET(self):
        with correlation_context(self.headers.get("X-Correlation-ID")):
            try:
                filters = ListingFilters.from_query(query_params(self))
            except ValidationError as e:
                logger.info("Rejected listing search query", error=str(e))
                write_json(self, 400, {"message": "Invalid search filters."})
                return

            try:
                listings = run_sync(search_listings(filters))
            except SupabaseError as e:
                logger.error("Listing search failed", error=str(e))
                write_json(self, 500, {"message": "Error fetching listings."})
                return
            except Exception as e:
                logger.error("Unexpected error in listing search", error=str(e), exc_info=True)
                write_json(self, 500, {"message": "Error fetching listings."})
                return

            write_json(self, 200, [listing.model_dump(mode="json") for listing in listings])
