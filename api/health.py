"""Health check endpoint."""

from http.server import BaseHTTPRequestHandler
from b2y.utils.http import write_json


class handler(BaseHTTPRequestHandler):
    """Health check handler for Vercel serverless function."""

    def do_GET(self):
        write_json(self, 200, {"status": "ok", "service": "b2y-marketplace-backend"})

    def do_POST(self):
        """Same as GET."""
        self.do_GET()
