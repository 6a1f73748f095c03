"""Sensor platform for LG webOS TV; the entity lives in entities/sensor.py."""

from .entities.sensor import async_setup_entry

__all__ = ["async_setup_entry"]
