"""
payload subpackage: occurrence -> canonical wire record.

Key primitives
--------------
- build_payload(): pure builder for the ``{"access_token", "data"}`` record
- serialize_configuration(): configuration snapshot for ``custom.configuration``
- deep_merge() / build_sorted(): structural-tree helpers used for the overlay and canonical ordering
"""

from .builder import build_payload, get_stack_frames, serialize_configuration
from .canonical import build_sorted, deep_merge

__all__ = [
    "build_payload",
    "build_sorted",
    "deep_merge",
    "get_stack_frames",
    "serialize_configuration",
]
