"""Core domain module for dashfeed.

This module contains the domain models, ports, and the I/O-free parts of
the sync logic. Network and filesystem access live in dashfeed.adapters.
"""

from dashfeed.core.csv_records import parse_records
from dashfeed.core.models import (
    CacheEntry,
    Credential,
    DataSource,
    DatasetView,
    ExportJob,
    FallbackDisclosure,
    FallbackReason,
    JobState,
)
from dashfeed.core.ports import ExporterPort, PayloadStorePort, TokenProvider


__all__ = [
    "CacheEntry",
    "Credential",
    "DataSource",
    "DatasetView",
    "ExportJob",
    "ExporterPort",
    "FallbackDisclosure",
    "FallbackReason",
    "JobState",
    "PayloadStorePort",
    "TokenProvider",
    "parse_records",
]
