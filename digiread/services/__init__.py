"""
Services Package

Business logic kept apart from HTTP handling so it can be tested without
the routers.

Current services:
- magic_link.py: link issuing, verification and credential exchange
- security.py: verification token values and session JWTs
- session.py: session cookie attributes
- mail.py: Mailtrap delivery of verification links
- storage.py: S3 object storage (covers, avatars, book files)
- payments.py: Stripe Checkout and webhook fulfilment
- ratings.py: book rating aggregation
- rate_limiter.py: slowapi limiter with a Redis backend
"""
