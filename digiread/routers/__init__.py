"""
API Routers Package

This package contains FastAPI routers that handle API endpoints.

Router Structure:
- auth.py: /api/v1/auth/* (magic link, session cookie, profile)
- authors.py: /api/v1/author/*
- books.py: /api/v1/book/*
- reviews.py: /api/v1/review/*
- history.py: /api/v1/history/*
- cart.py: /api/v1/cart/*
- checkout.py: /api/v1/checkout and /api/v1/webhook

Each router is imported and registered in main.py.
"""

from digiread.routers.auth import router as auth_router
from digiread.routers.authors import router as authors_router
from digiread.routers.books import router as books_router
from digiread.routers.cart import router as cart_router
from digiread.routers.checkout import router as checkout_router
from digiread.routers.history import router as history_router
from digiread.routers.reviews import router as reviews_router

__all__ = [
    "auth_router",
    "authors_router",
    "books_router",
    "cart_router",
    "checkout_router",
    "history_router",
    "reviews_router",
]
