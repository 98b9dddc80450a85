"""Upload session and result models for the file host."""

from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

UPLOAD_HOST = "top4top.io"


class UploadSession(BaseModel):
    """Session token and cookies scraped from the host landing page.

    Lives for one upload attempt and is never persisted.
    """

    sid: str
    cookies: list[str] = Field(default_factory=list)  # "name=value" pairs

    @property
    def cookie_header(self) -> str:
        """Cookies joined into a single ``Cookie`` header value."""
        return "; ".join(self.cookies)


class UploadResult(BaseModel):
    """Links to the uploaded file."""

    model_config = ConfigDict(frozen=True)

    direct_link: str
    page_link: str

    @field_validator("direct_link")
    @classmethod
    def _direct_link_on_host(cls, value: str) -> str:
        host = urlparse(value).hostname or ""
        if host != UPLOAD_HOST and not host.endswith("." + UPLOAD_HOST):
            raise ValueError(f"direct link is not on {UPLOAD_HOST}: {value!r}")
        return value
