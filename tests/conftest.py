"""Pytest bootstrap configuration.

Ensure environment variables are set before test collection and module
imports that depend on application settings.
"""
import os

os.environ.setdefault("DATABASE__URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("STORE_API__APPLICATION_ID", "app-test")
os.environ.setdefault("STORE_API__BASE_URL", "https://store.test/v1")
os.environ.setdefault("PAGHIPER__BASE_URL", "https://paghiper.test")
os.environ.setdefault("DEBUG", "false")
