"""Module entry point: python -m biketrail ..."""

from __future__ import annotations

from biketrail.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
