"""FastAPI dependencies shared by the processing routes."""

import logging

from plainly.core.exceptions import ConfigurationError
from plainly.services.pipeline import ProcessingPipeline, create_pipeline

logger = logging.getLogger(__name__)


def get_pipeline() -> ProcessingPipeline:
    """Provide a pipeline built from settings; raises ConfigurationError (500) if unconfigured."""
    return create_pipeline()


def get_optional_pipeline() -> ProcessingPipeline | None:
    """Like ``get_pipeline`` but returns None when credentials are missing."""
    try:
        return create_pipeline()
    except ConfigurationError:
        logger.warning("Pipeline not configured; title generation will use the placeholder")
        return None
