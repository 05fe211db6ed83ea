"""Logging configuration for storefront."""

import logging

import structlog

logger = structlog.get_logger("storefront")

# Suppress noisy library loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
