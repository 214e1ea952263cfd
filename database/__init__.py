"""
Database module for the quote vault.
Provides SQLite database operations with async support.
"""

from .connection import DatabaseManager
from .operations import QuoteOperations
from .base_store import BaseQuoteStore, QuotePageResult
from .query_builder import QuoteQuery, QuoteQueryBuilder, QuotePage

__all__ = [
    'models', 'connection', 'operations', 'query_builder',
    'DatabaseManager', 'QuoteOperations', 'BaseQuoteStore', 'QuotePageResult',
    'QuoteQuery', 'QuoteQueryBuilder', 'QuotePage'
]
