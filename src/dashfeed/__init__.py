"""dashfeed - Resilient dataset sync for Zoho Analytics dashboards.

Server side, datasets are exported from Zoho Analytics views (falling back
from the synchronous to the job-based export API when Zoho demands it) and
cached in process memory. Client side, every source degrades from network
to a stored copy to a bundled snapshot, and says so.

Example:
    >>> from dashfeed import ResilientClientFetcher, Settings
    >>> result = ResilientClientFetcher.from_settings(Settings.from_env()).fetch_all()
    >>> result.offline_notice  # None unless some source was degraded
"""

from dashfeed.adapters.cache import FilePayloadStore
from dashfeed.adapters.executor import SynchronousExecutor, ThreadPoolExecutorAdapter
from dashfeed.adapters.http import ExportProtocolDriver, TokenLifecycleManager
from dashfeed.adapters.network import HttpPayloadFetcher
from dashfeed.config import Settings, find_project_root
from dashfeed.core.csv_records import parse_records
from dashfeed.core.dataset_cache import ProcessDatasetCache
from dashfeed.core.exceptions import (
    AuthError,
    ConfigurationError,
    DashfeedError,
    DatasetNotFoundError,
    ExportError,
    ExportTimeoutError,
    SourceFetchError,
    StoreCorruptError,
)
from dashfeed.core.fallback import ResilientClientFetcher
from dashfeed.core.models import (
    OFFLINE_NOTICE,
    Credential,
    DataSource,
    DatasetRecord,
    DatasetView,
    DataTier,
    ExportJob,
    FallbackDisclosure,
    FallbackReason,
    FetchAllResult,
    JobState,
)
from dashfeed.core.services import DatasetService
from dashfeed.refresh import DashboardRefresher, DashboardState


__version__ = "0.1.0"

__all__ = [
    "OFFLINE_NOTICE",
    "AuthError",
    "ConfigurationError",
    "Credential",
    "DashboardRefresher",
    "DashboardState",
    "DashfeedError",
    "DataSource",
    "DataTier",
    "DatasetNotFoundError",
    "DatasetRecord",
    "DatasetService",
    "DatasetView",
    "ExportError",
    "ExportJob",
    "ExportProtocolDriver",
    "ExportTimeoutError",
    "FallbackDisclosure",
    "FallbackReason",
    "FetchAllResult",
    "FilePayloadStore",
    "HttpPayloadFetcher",
    "JobState",
    "ProcessDatasetCache",
    "ResilientClientFetcher",
    "Settings",
    "SourceFetchError",
    "StoreCorruptError",
    "SynchronousExecutor",
    "ThreadPoolExecutorAdapter",
    "TokenLifecycleManager",
    "__version__",
    "find_project_root",
    "parse_records",
]
