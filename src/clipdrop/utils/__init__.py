# ABOUTME: Cross-cutting utilities and shared infrastructure
# ABOUTME: Supporting services: logging, download retries, CLI tables

"""
Utils Layer: Shared infrastructure and cross-cutting concerns

This layer provides:
- Logging configuration and structured loggers
- Retry handling for downloads
- Rich tables for CLI output
"""

from . import logging

__all__ = [
    "logging",
]
