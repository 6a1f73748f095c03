"""Binary sensor platform for LG webOS TV; the entity lives in entities/binary_sensor.py."""

from .entities.binary_sensor import async_setup_entry

__all__ = ["async_setup_entry"]
