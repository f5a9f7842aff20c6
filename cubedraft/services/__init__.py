"""
CubeDraft services.

Cube and draft logic, plus the loaders and caches around them.
"""

from cubedraft.services.card_matcher import find_card
from cubedraft.services.context import DIGEST_KEY, DraftContext
from cubedraft.services.cube import Cube, decode_varints, encode_varint
from cubedraft.services.cube_loader import fetch_cube_records, load_cube
from cubedraft.services.draft import SEATS_KEY, Draft, DraftRules, SeatView
from cubedraft.services.image_cache import ImageCache

__all__ = [
    "DIGEST_KEY",
    "SEATS_KEY",
    "Cube",
    "Draft",
    "DraftContext",
    "DraftRules",
    "ImageCache",
    "SeatView",
    "decode_varints",
    "encode_varint",
    "fetch_cube_records",
    "find_card",
    "load_cube",
]
