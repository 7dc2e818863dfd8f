"""Compatibility shim for src-layout imports.

The real package lives in src/doorknocking_tracker. Running
`python -m doorknocking_tracker` from the repo root would otherwise pick up
this directory first as an incomplete package, so extend the package search
path to the src/ implementation and expose its public names lazily.
"""

from __future__ import annotations

from pathlib import Path
import sys

_SRC_DIR = Path(__file__).resolve().parent.parent / "src"
_IMPL_PKG_DIR = _SRC_DIR / "doorknocking_tracker"

if _IMPL_PKG_DIR.is_dir():
    src_str = str(_SRC_DIR)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)

    impl_str = str(_IMPL_PKG_DIR)
    if impl_str not in list(__path__):  # type: ignore[name-defined]
        __path__.append(impl_str)  # type: ignore[name-defined]

    __all__ = ["ActivityLedger", "PropertyDirectory"]
else:
    __all__ = []


def __getattr__(name: str):
    if name == "ActivityLedger":
        from .ledger import ActivityLedger

        return ActivityLedger
    if name == "PropertyDirectory":
        from .directory import PropertyDirectory

        return PropertyDirectory
    raise AttributeError(name)
