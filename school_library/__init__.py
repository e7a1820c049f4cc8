"""School Library - loan tracking for a school library catalog

Modules:
- Data models (book.py, loan.py)
- In-memory state (store.py)
- Catalog, loans and stock bookkeeping (catalog.py, loans.py, inventory.py)
- Composition root (library.py)
- HTTP API (api.py) and CLI (main.py)
"""

__version__ = "1.0.0"
