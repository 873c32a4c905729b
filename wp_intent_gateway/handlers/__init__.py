"""
Intent handler registration.

Each handler module exposes ``register_handlers()`` which fills the
executor's (resource, action) table.
"""

import logging

logger = logging.getLogger("wp-gateway.handlers")


def register_all_handlers() -> None:
    """Register every resource handler with the executor."""
    from . import comments, content, media, site, taxonomy, users

    for module in (content, media, users, taxonomy, comments, site):
        module.register_handlers()

    logger.info("All intent handlers registered")
