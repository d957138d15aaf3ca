"""Database package - ORM models, repositories and the DatabaseManager facade.

Usage:
    ```python
    from database import DatabaseManager

    db = DatabaseManager("sqlite:///data/salon.db")
    db.create_tables()
    db.seed()
    ```
"""
from .manager import DatabaseManager

__all__ = ["DatabaseManager"]
