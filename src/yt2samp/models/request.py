"""Validated conversion request."""

from pydantic import BaseModel, ConfigDict


class ExtractionRequest(BaseModel):
    """A source URL that matched an accepted YouTube link shape, plus who asked for it.

    Build through ``yt2samp.extraction.urls.build_request`` so the shape check
    always runs first.
    """

    model_config = ConfigDict(frozen=True)

    source_url: str
    user_id: str
