"""Storage layer for Fairhouse - file-based persistence of casino state.

The engine works on an in-memory ``CasinoState``; callers load it before an
operation and save it afterwards. Writes are atomic (tempfile -> rename).
"""

from .state import (
    CasinoState,
    create_default_state,
    get_data_dir,
    load_state,
    save_state,
)

__all__ = [
    "CasinoState",
    "create_default_state",
    "get_data_dir",
    "load_state",
    "save_state",
]
