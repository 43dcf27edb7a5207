"""
Acquisition strategies and payload decoding.
"""

from .codec import ResourceCodec, unwrap_envelope
from .mounted import MountedPathSource, resource_file_name
from .remote import RemotePullSource, resource_url, fetch_bytes
from .fallback import FallbackResolver, fallback_url

__all__ = [
    "ResourceCodec",
    "unwrap_envelope",
    "MountedPathSource",
    "resource_file_name",
    "RemotePullSource",
    "resource_url",
    "fetch_bytes",
    "FallbackResolver",
    "fallback_url",
]
