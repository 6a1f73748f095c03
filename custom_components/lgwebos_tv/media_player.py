"""Media player platform for LG webOS TV; the entity lives in entities/media_player.py."""

from .entities.media_player import async_setup_entry

__all__ = ["async_setup_entry"]
