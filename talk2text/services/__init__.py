"""Services layer for talk2text application logic."""

from .session_coordinator import SessionCoordinator, DispatchAction
from .publisher import SessionPublisher

__all__ = [
    "SessionCoordinator",
    "DispatchAction",
    "SessionPublisher"
]
