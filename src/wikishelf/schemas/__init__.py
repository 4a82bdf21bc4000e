"""Pydantic schemas for config files and external API responses."""

from wikishelf.schemas.config import ConfigSchema, validate_config
from wikishelf.schemas.wikipedia import (
    OpenSearchResponse,
    QueryPage,
    QueryResponse,
    validate_opensearch_response,
    validate_query_response,
)

__all__ = [
    "ConfigSchema",
    "validate_config",
    "OpenSearchResponse",
    "QueryPage",
    "QueryResponse",
    "validate_opensearch_response",
    "validate_query_response",
]
