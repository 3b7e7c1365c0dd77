#!/usr/bin/env python3
"""
Run migrations (same process, same DATABASE_URL), then seed, then uvicorn.
Tables must exist before the seed runs and the app starts.
"""
import os
import sys

# 1) Wait for DB (Postgres only; SQLite needs no wait)
from reservations.core.config import settings

if settings.DATABASE_URL.startswith("postgresql"):
    from wait_for_db import wait_for_db

    wait_for_db(settings.DATABASE_URL, int(os.getenv("DB_WAIT_TIMEOUT", "60")))

# 2) Run migrations using the same settings as the app
from alembic.config import Config
from alembic import command

alembic_cfg = Config(os.path.join(os.path.dirname(__file__), "alembic.ini"))
alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
command.upgrade(alembic_cfg, "head")

# 3) Seed on the app session factory now that the schema is in place
from reservations.seed import run as run_seed

run_seed()

# 4) Start uvicorn (replace current process)
port = os.getenv("PORT", "8000")
os.execv(
    sys.executable,
    [sys.executable, "-m", "uvicorn", "reservations.main:app", "--host", "0.0.0.0", "--port", port],
)
