"""Data models for the yt2samp pipeline."""

from yt2samp.models.conversion import ConversionResult
from yt2samp.models.media import CredentialStrategy, ExtractionResult
from yt2samp.models.request import ExtractionRequest
from yt2samp.models.upload import UploadResult, UploadSession

__all__ = [
    "ConversionResult",
    "CredentialStrategy",
    "ExtractionRequest",
    "ExtractionResult",
    "UploadResult",
    "UploadSession",
]
