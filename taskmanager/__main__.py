from __future__ import annotations

from taskmanager.cli import main

if __name__ == "__main__":
    main()
