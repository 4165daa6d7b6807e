"""
Utility helpers shared by the core modules.
"""

from .random import numeric, string_to_hash, sub_seed, to_int32

__all__ = ['numeric', 'string_to_hash', 'sub_seed', 'to_int32']
