"""
Logger module for personbook.

This module provides a centralized logger that can be imported throughout the package
without causing circular import issues.
"""

import logging

# Module-level logger. Modules hold on to this adapter, so swapping the logger it wraps reaches all of them.
logger: logging.LoggerAdapter = logging.LoggerAdapter(logging.getLogger('personbook'))
logger.setLevel(logging.WARNING)  # Default to WARNING level to avoid spam

def set_logger(custom_logger: logging.Logger) -> None:
    """Allow users to provide their own logger."""
    logger.logger = custom_logger

def set_log_level(level: int) -> None:
    """Set the logging level for the package. 
    
    Args:
        level: logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, or logging.CRITICAL
    """
    logger.setLevel(level)
