"""
SQLAlchemy Models Package

This package contains all database models for the DigiRead API.
Models are SQLAlchemy ORM classes that map to database tables.

Model Relationships:
- User <-> Book: Many-to-Many through user_books (the user's library)
- Author -> Book: One-to-Many (a book has exactly one author)
- User -> VerificationToken: at most one live magic-link token per user
- Book -> Review: One-to-Many, one review per (user, book)

Import all models here to:
1. Make them available as: from digiread.models import Book, User
2. Ensure Alembic discovers them for migrations
"""

# Import all models so Alembic can discover them
from digiread.models.user import User, UserRole, user_books
from digiread.models.verification_token import VerificationToken
from digiread.models.author import Author
from digiread.models.book import Book
from digiread.models.review import Review
from digiread.models.history import History
from digiread.models.cart import Cart, CartItem

__all__ = [
    "User",
    "UserRole",
    "user_books",
    "VerificationToken",
    "Author",
    "Book",
    "Review",
    "History",
    "Cart",
    "CartItem",
]
