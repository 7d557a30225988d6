from trellis_core.errors import TrellisError
from .events import EventEmitter, Subscription
from .model import Collection, Model
from .view import DelegatedHandler, DomEvent, View, unique_id

__all__ = [
    "Collection",
    "DelegatedHandler",
    "DomEvent",
    "EventEmitter",
    "Model",
    "Subscription",
    "TrellisError",
    "View",
    "unique_id",
]
