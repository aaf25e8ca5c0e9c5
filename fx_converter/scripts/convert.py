"""CLI entry point for converting amounts between currencies."""

from __future__ import annotations

import sys

from fx_converter.ui.terminal import main

if __name__ == "__main__":  # pragma: no cover - thin wrapper
    sys.exit(main())
