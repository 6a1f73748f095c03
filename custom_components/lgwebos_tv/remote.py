"""Remote platform for LG webOS TV; the entity lives in entities/remote.py."""

from .entities.remote import async_setup_entry

__all__ = ["async_setup_entry"]
