"""Pipeline output handed to the chat surface."""

from pydantic import BaseModel


class ConversionResult(BaseModel):
    """Everything the reply needs: what was converted and where it now lives."""

    title: str
    duration: str  # "M:SS"
    direct_link: str
    page_link: str
    source_url: str
