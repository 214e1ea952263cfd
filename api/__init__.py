"""
API module for the quote vault.
Provides the FastAPI-based REST API for quotes, tags and admin sessions.
"""

__all__ = ['app', 'routes', 'models', 'middleware', 'dependencies']
