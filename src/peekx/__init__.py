"""peekx: read-tracking reactive stores for Python."""

from importlib.metadata import version as _version

__version__ = _version("peekx")

from peekx.errors import ObserverError, PeekxError, StoreFactoryError
from peekx.paths import MISSING, Path, Segment, SegmentKind, resolve
from peekx.kinds import ValueKind, classify, strictly_changed
from peekx.registry import PathRegistry
from peekx.detector import recheck
from peekx.notifier import notify, observers_for
from peekx.hooks import AccessInfo, ChangeInfo, Hooks
from peekx.proxy import TrackingProxy, unwrap
from peekx.subscription import Subscription
from peekx.engine import StoreEngine, StoreState, create_store
from peekx.linked import LinkedProxy, LinkedStore
from peekx.persist import persisted
# textual NOT auto-imported — opt-in only

__all__ = [
    "StoreEngine",
    "StoreState",
    "Subscription",
    "create_store",
    "LinkedStore",
    "LinkedProxy",
    "TrackingProxy",
    "unwrap",
    "Hooks",
    "AccessInfo",
    "ChangeInfo",
    "PathRegistry",
    "recheck",
    "notify",
    "observers_for",
    "Path",
    "Segment",
    "SegmentKind",
    "resolve",
    "MISSING",
    "ValueKind",
    "classify",
    "strictly_changed",
    "persisted",
    "PeekxError",
    "StoreFactoryError",
    "ObserverError",
]
