"""Core data models and persistence building blocks for Recordset VCR."""

from recordset_vcr.core.format import Exchange, RecordedRequest, RecordedResponse, Recordset
from recordset_vcr.core.blobs import BlobStore, resolve_extension
from recordset_vcr.core.codec import RecordsetCodec
from recordset_vcr.core.overlay import compress, expand

__all__ = [
    "Exchange",
    "RecordedRequest",
    "RecordedResponse",
    "Recordset",
    "BlobStore",
    "resolve_extension",
    "RecordsetCodec",
    "compress",
    "expand",
]
