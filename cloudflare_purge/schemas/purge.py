"""Wire schemas for the purge endpoint.

Field names are snake_case in Python and camelCase on the wire.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PurgeRequestBody(_CamelModel):
    """Body of ``POST /cloudflare-purge``."""

    files: list[str] | None = Field(default=None, description="URLs to purge")
    purge_everything: bool = Field(default=False, description="Purge the whole zone")


class PurgeDetails(_CamelModel):
    status: int = Field(..., description="Cloudflare HTTP status (0 when skipped)")
    files_purged: int = Field(..., description="Number of URLs sent")
    purge_everything: bool
    execution_time: str = Field(..., description="Elapsed time, e.g. '120ms'")


class PurgeResponse(_CamelModel):
    """200 response. ``cloudflare_response`` is only set in debug mode."""

    success: bool
    correlation_id: str
    details: PurgeDetails
    cloudflare_response: Any = None


class PurgeErrorResponse(_CamelModel):
    """400 / 401 / 500 response."""

    error: str
    correlation_id: str
    details: Any = None
