"""
Workflows combining the store, image and AI collaborators.
"""

from .product_creation import ProductCreationFlow

__all__ = ['ProductCreationFlow']
