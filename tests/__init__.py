"""
Test Suite for DigiRead API

Test Organization:
- conftest.py: Shared fixtures (test database, client, fakes, sample data)
- test_auth.py: magic link request, verification and token exchange
- test_session.py: session credential sources, logout and guards
- test_profile.py: profile and avatar updates
- test_authors.py, test_books.py, test_reviews.py: catalog endpoints
- test_history.py, test_cart.py, test_payments.py: reading and buying
- test_services.py: service helpers without HTTP

Running Tests:
    pytest
    pytest tests/test_auth.py -v
"""
