"""Thingometer: parade and contest judging service"""

__version__ = "1.0.0"
