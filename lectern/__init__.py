"""Checkout-level `lectern` package.

Lets `python -m lectern.cli.open_book` run from a source checkout without an
install by extending this package's search path to `src/lectern`.
"""

from __future__ import annotations

from pathlib import Path

_ROOT = Path(__file__).resolve().parent.parent
_SRC_PACKAGE = _ROOT / "src" / "lectern"

if _SRC_PACKAGE.is_dir():
    __path__.append(str(_SRC_PACKAGE))
