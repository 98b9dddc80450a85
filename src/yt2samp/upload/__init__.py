"""Upload to top4top.io through a DNS-pinned HTTP client.

Public API:
    Top4topUploader.upload(file_path) -> UploadResult
        Session scrape, multipart POST, redirect follow, link cascade.
"""

from yt2samp.upload.links import LINK_PATTERNS, LinkPattern, extract_direct_link
from yt2samp.upload.resolver import ResolvingTransport, StaticHostResolver, create_resolved_client
from yt2samp.upload.top4top import Top4topUploader

__all__ = [
    "LINK_PATTERNS",
    "LinkPattern",
    "ResolvingTransport",
    "StaticHostResolver",
    "Top4topUploader",
    "create_resolved_client",
    "extract_direct_link",
]
