"""
Logging setup for customhook.

Modules log through the standard library (``logging.getLogger(__name__)``);
this package only configures where those records go.
"""

from customhook.logging.handlers import LOG_FORMAT, ComponentFilter, configure_logging

__all__ = ["LOG_FORMAT", "ComponentFilter", "configure_logging"]
