"""Block until the Postgres server behind DATABASE_URL accepts connections."""
import os
import time
from urllib.parse import urlparse

import psycopg2


def _connect_params(database_url: str) -> dict:
    # SQLAlchemy URLs carry a driver suffix psycopg2 does not understand
    url = database_url
    for driver in ("+psycopg2", "+asyncpg", "+psycopg"):
        url = url.replace(f"postgresql{driver}://", "postgresql://")
    p = urlparse(url)
    return {
        "host": p.hostname or "db",
        "port": p.port or 5432,
        "user": p.username or "reservations",
        "password": p.password or "reservations",
        "dbname": (p.path or "").lstrip("/") or "reservations",
    }


def wait_for_db(database_url: str, timeout_s: int = 60) -> None:
    params = _connect_params(database_url)
    print(
        f"[wait_for_db] Waiting for Postgres at {params['host']}:{params['port']} "
        f"db={params['dbname']} user={params['user']} (timeout={timeout_s}s)"
    )
    start = time.time()
    while True:
        try:
            psycopg2.connect(**params).close()
            print("[wait_for_db] Postgres is ready.")
            return
        except psycopg2.OperationalError as e:
            if time.time() - start > timeout_s:
                print(f"[wait_for_db] Timed out waiting for DB. Last error: {e}")
                raise
            time.sleep(1)


if __name__ == "__main__":
    url = os.getenv("DATABASE_URL")
    if not url:
        raise SystemExit("DATABASE_URL is not set")
    wait_for_db(url, int(os.getenv("DB_WAIT_TIMEOUT", "60")))
