"""sfmap - Async place-directory sync and AMap navigation dispatch."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("sfmap")
except PackageNotFoundError:
    __version__ = "0+local"
from sfmap.client import SfmClient
from sfmap.config import ConfigResolver, SfmConfig
from sfmap.directory.events import ChangeKind, DirectoryChange
from sfmap.directory.filters import PlaceFilter
from sfmap.directory.reconciler import DirectoryReconciler
from sfmap.exceptions import (
    ConfigurationMissingError,
    GeocodeError,
    LocationError,
    MalformedResponseError,
    PlaceNotFoundError,
    PlaceValidationError,
    PlanningError,
    RemoteRequestError,
    SfmConfigError,
    SfmError,
    SfmTransportError,
)
from sfmap.handoff import build_handoff_uri, detect_platform
from sfmap.models import (
    Coordinates,
    LocalSnapshot,
    Place,
    PlaceDraft,
    Platform,
    PositionOptions,
    Provenance,
    RouteResult,
    TravelMode,
)
from sfmap.storage import JsonFileStorage, MemoryStorage

__all__ = [
    "__version__",
    "ChangeKind",
    "ConfigResolver",
    "ConfigurationMissingError",
    "Coordinates",
    "DirectoryChange",
    "DirectoryReconciler",
    "GeocodeError",
    "JsonFileStorage",
    "LocalSnapshot",
    "LocationError",
    "MalformedResponseError",
    "MemoryStorage",
    "Place",
    "PlaceDraft",
    "PlaceFilter",
    "PlaceNotFoundError",
    "PlaceValidationError",
    "PlanningError",
    "Platform",
    "PositionOptions",
    "Provenance",
    "RemoteRequestError",
    "RouteResult",
    "SfmClient",
    "SfmConfig",
    "SfmConfigError",
    "SfmError",
    "SfmTransportError",
    "TravelMode",
    "build_handoff_uri",
    "detect_platform",
]
