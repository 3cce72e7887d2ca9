"""
Serverless entry point. Vercel serves the ASGI `app` exported here.
"""

from main import app

__all__ = ["app"]
