"""
Data Ingestion Module

Demo data seeding for local development.
"""
from .seed_db import DemoSeeder

__all__ = [
    "DemoSeeder",
]
