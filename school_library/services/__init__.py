"""School Library - Services Package

External integrations:
- Google Books metadata lookup
- Shared HTTP client
"""
