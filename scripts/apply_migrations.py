#!/usr/bin/env python
import logging
import os
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config
from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def main():
    repo_root = Path(__file__).resolve().parents[1]
    env_path = repo_root / ".env"
    if env_path.exists():
        load_dotenv(env_path)
    # Host-run migrations may target a different URL than the app container
    migrations_url = os.getenv("MIGRATIONS_DATABASE_URL")
    if migrations_url:
        os.environ["DATABASE_URL"] = migrations_url

    target = sys.argv[1] if len(sys.argv) > 1 else "head"
    config = Config(str(repo_root / "alembic.ini"))
    config.set_main_option("script_location", str(repo_root / "alembic"))
    logger.info("Upgrading database to %s", target)
    command.upgrade(config, target)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
