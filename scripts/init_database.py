#!/usr/bin/env python3
"""
Initialize database tables (development only)
In production, use Alembic migrations.
"""
import sys
import os

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from meetbook.core.db import create_tables
from meetbook.core import models  # noqa: F401  registers tables on Base.metadata

def main():
    print("Initializing database tables...")
    try:
        create_tables()
        print("Database tables created successfully")
    except Exception as e:
        print(f"Error creating tables: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
