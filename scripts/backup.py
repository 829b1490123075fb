"""Backup database.

Note: Needs `mongodump` from the MongoDB Database Tools on PATH.
"""

from __future__ import annotations

import importlib
import subprocess
from datetime import datetime
from pathlib import Path

from config import get_settings_module


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    mongo = settings.MONGO_CONFIG

    out_dir = Path(__file__).resolve().parents[1] / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_file = out_dir / f"{mongo['database']}_{ts}.archive.gz"

    cmd = [
        "mongodump",
        f"--uri={mongo['uri']}",
        f"--db={mongo['database']}",
        f"--archive={out_file}",
        "--gzip",
    ]

    try:
        subprocess.run(cmd, stderr=subprocess.PIPE, check=True)
        print(f"OK: Backup created: {out_file}")
    except FileNotFoundError:
        raise SystemExit("`mongodump` not found. Install the MongoDB Database Tools first.")


if __name__ == "__main__":
    main()
