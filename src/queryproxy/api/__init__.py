"""HTTP surface of QueryProxy.

Routes:
    GET  /health
    POST /api/test-connection
    POST /api/execute-query
"""

from .app import create_app

__all__ = ["create_app"]
