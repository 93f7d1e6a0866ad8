"""Module entrypoint for launching the desktop player."""
from __future__ import annotations

import app


def main() -> int:
    return app.main()


if __name__ == "__main__":
    raise SystemExit(main())
