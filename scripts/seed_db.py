from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.workforce_hub.workforce_hub.database.bootstrap import DEMO_ACCOUNTS, apply_seed_sql, ensure_demo_users
from src.workforce_hub.workforce_hub.database.connection import DBConfig

logger = logging.getLogger("seed_db")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    ensure_demo_users(db_config)

    logger.info("Seeded database -> %s", DBConfig.from_dict(db_config).describe())
    for _, _, email, password, role, _, _ in DEMO_ACCOUNTS:
        logger.info("  %-8s %s / %s", role, email, password)


if __name__ == "__main__":
    main()
