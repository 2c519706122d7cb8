"""
rolodex.server - HTTP facade (FastAPI)
"""

from rolodex.server.app import AppState, create_app

__all__ = ["AppState", "create_app"]
