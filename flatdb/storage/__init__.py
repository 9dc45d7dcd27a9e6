"""Storage module - Table file format and persistence"""

from .engine import TableFile
from .format import RecordCodec, DEFAULT_SEPARATOR

__all__ = ['TableFile', 'RecordCodec', 'DEFAULT_SEPARATOR']
