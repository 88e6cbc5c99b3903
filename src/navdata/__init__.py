try:
    from ._version import version as __version__  # populated by setuptools-scm
except ModuleNotFoundError:
    __version__ = "0.0.0"

from .client import NavdataClient
from .codec import ProtocolError
from .envelopes import (
    CallEnvelope,
    Coordinates,
    DownloadProgress,
    DownloadProgressPhase,
    EventEnvelope,
    EventName,
    FunctionName,
    ResultEnvelope,
    ResultStatus,
)
from .errors import NavdataError
from .interface import NavigationDataInterface
from .readiness import ReadinessGate, ReadinessState
from .registry import (
    CallLimitError,
    CallTimeoutError,
    ClientClosedError,
    DuplicateCallError,
    RemoteError,
)
from .transports import InProcessBus, Transport

__all__ = [
    "__version__",
    "NavdataClient",
    "NavigationDataInterface",
    "Transport",
    "InProcessBus",
    "CallEnvelope",
    "ResultEnvelope",
    "EventEnvelope",
    "FunctionName",
    "EventName",
    "ResultStatus",
    "DownloadProgress",
    "DownloadProgressPhase",
    "Coordinates",
    "ReadinessGate",
    "ReadinessState",
    "NavdataError",
    "ProtocolError",
    "RemoteError",
    "CallTimeoutError",
    "CallLimitError",
    "DuplicateCallError",
    "ClientClosedError",
]
