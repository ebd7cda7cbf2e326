"""
Configuration objects for the Flask control API.

Override via environment variables. Sniffer behaviour itself (device
keyword, ports, path filters, broker) lives in the JSON file pointed to by
SNIFFER_CONFIG and is parsed by payload_router.config.
"""

from __future__ import annotations
import os


class Config:
    """Base configuration (safe defaults)."""

    # Security
    SECRET_KEY = os.getenv("FLASK_SECRET_KEY", "dev-unsafe-change-this")

    # Sniffer settings file
    SNIFFER_CONFIG = os.getenv("SNIFFER_CONFIG", "config.json")

    # Logging
    LOG_FILE = os.getenv("APP_LOG_FILE", "logs/sniffer.log")
    LOG_LEVEL = os.getenv("APP_LOG_LEVEL", "INFO")

    # Also print accepted records to stdout while serving the API
    PRINT_RECORDS = os.getenv("PRINT_RECORDS", "0") == "1"


class ProductionConfig(Config):
    """Production overrides."""
    LOG_LEVEL = os.getenv("APP_LOG_LEVEL", "INFO")


class DevelopmentConfig(Config):
    """Development overrides."""
    LOG_LEVEL = os.getenv("APP_LOG_LEVEL", "DEBUG")
    PRINT_RECORDS = os.getenv("PRINT_RECORDS", "1") == "1"


class TestingConfig(Config):
    """Used by the test suite: no log file, no console echo."""
    TESTING = True
    LOG_FILE = None
    LOG_LEVEL = "WARNING"
    PRINT_RECORDS = False
