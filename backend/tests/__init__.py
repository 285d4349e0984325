"""
Pytest suite for the Top-up Storefront backend.

Test categories:
- Unit tests: models, auth helpers, rate limiter, grouping
- Integration tests: services and the FastAPI app against in-memory SQLite
- Concurrency tests: racing redemptions on a file-backed SQLite database
"""
