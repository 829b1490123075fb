from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.gym_backend.gym_backend.database.bootstrap import ensure_indexes, list_collections
from src.gym_backend.gym_backend.database.connection import DatabaseConnection, MongoConfig


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    mongo = dict(settings.MONGO_CONFIG)

    conn = DatabaseConnection.get_instance(MongoConfig(uri=mongo["uri"], database=mongo["database"]))
    try:
        db = conn.database()
        ensure_indexes(db)
        print(f"OK: Indexes ready -> {mongo['uri']}/{mongo['database']} (collections={len(list_collections(db))})")
    finally:
        conn.close()


if __name__ == "__main__":
    main()
