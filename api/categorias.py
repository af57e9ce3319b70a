"""Approved categories endpoint."""

from http.server import BaseHTTPRequestHandler
from b2y.services.categories import list_categories
from b2y.utils.http import write_json


class handler(BaseHTTPRequestHandler):
    """Vercel serverless function handler returning the category list."""

    def do_GET(self):
        write_json(self, 200, [category.model_dump() for category in list_categories()])
