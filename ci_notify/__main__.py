"""Allow ``python -m ci_notify``."""

from __future__ import annotations

from ci_notify.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
