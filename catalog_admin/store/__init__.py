"""
Product persistence.

Modules:
    base - ProductStore interface and shared record preparation
    supabase_store - Supabase (PostgREST) implementation
    memory_store - In-memory implementation with demo data
"""

from .base import ProductStore, StoreError, friendly_error, prepare_new_product
from .memory_store import InMemoryProductStore
from .supabase_store import SupabaseProductStore

__all__ = [
    'ProductStore',
    'StoreError',
    'friendly_error',
    'prepare_new_product',
    'InMemoryProductStore',
    'SupabaseProductStore',
]
