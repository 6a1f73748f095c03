"""Entities for LG webOS TV."""

from .binary_sensor import (
    LgWebOsTvConnectedBinarySensor,
    LgWebOsTvPointerBinarySensor,
)
from .media_player import LgWebOsTvMediaPlayer
from .remote import LgWebOsTvRemote
from .sensor import (
    LgWebOsTvConnectionStateSensor,
    LgWebOsTvRecentEventsSensor,
)

__all__ = [
    "LgWebOsTvMediaPlayer",
    "LgWebOsTvRemote",
    "LgWebOsTvConnectionStateSensor",
    "LgWebOsTvRecentEventsSensor",
    "LgWebOsTvConnectedBinarySensor",
    "LgWebOsTvPointerBinarySensor",
]
