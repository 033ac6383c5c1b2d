"""data module"""

from .base import DbAdapter
import logging

logger = logging.getLogger(__name__)


# Conditional import - only import if dependencies are available
try:
    from .postgresql import PostgreSQLAdapter
except ImportError:
    logger.info("PostgreSQLAdapter not loaded - probably, missing dependencies")
