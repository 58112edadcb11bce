"""
DigiRead API Application Package

Backend for a digital book store: magic-link authentication, author and
book catalog, reviews, reading history, cart and checkout.

Package Structure:
- config.py: Application configuration using Pydantic Settings
- database.py: SQLAlchemy database connection and session management
- exceptions.py: Domain errors mapped to HTTP responses
- main.py: FastAPI application factory and configuration
- dependencies.py: Dependency injection functions (session, identity, guards)
- models/: SQLAlchemy ORM models
- schemas/: Pydantic request/response schemas
- routers/: API route handlers
- services/: Business logic (magic links, mail, storage, payments, ratings)
- utils/: Helper functions
"""

__version__ = "0.1.0"
