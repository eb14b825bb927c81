"""
Portable column types.

Models are written against PostgreSQL (native UUID and JSONB), with generic
fallbacks so the metadata still compiles on other dialects.
"""

from sqlalchemy import JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB

# UUID primary/foreign keys exposed to Python as strings
GUID = Uuid(as_uuid=False)

# Schema-free JSON documents (vote payloads, aggregates, vote configs)
JSONDocument = JSON().with_variant(JSONB(), "postgresql")
