from contextlib import contextmanager

from psycopg2.pool import SimpleConnectionPool

from settings import settings

_pool: SimpleConnectionPool | None = None


def init_pool():
    """
    Open the pool on first use. The memory store never touches it, so
    dev and test runs need no database.
    """
    global _pool
    if _pool is not None:
        return
    if not settings.DATABASE_URL:
        raise RuntimeError("DATABASE_URL is not set.")
    _pool = SimpleConnectionPool(
        minconn=settings.DB_POOL_MIN,
        maxconn=settings.DB_POOL_MAX,
        dsn=settings.DATABASE_URL,
        connect_timeout=5,
        application_name="jelantah_api",
    )


def close_pool():
    global _pool
    if _pool:
        _pool.closeall()
        _pool = None


@contextmanager
def get_conn():
    """
    One transaction per block: commit on success, rollback on any error.
    """
    init_pool()
    conn = _pool.getconn()

    try:
        # order writes are short; a stuck statement is a bug, not load
        with conn.cursor() as cur:
            cur.execute("SET LOCAL statement_timeout = %s;", (f"{settings.DB_STATEMENT_TIMEOUT_MS}ms",))

        yield conn
        conn.commit()

    except Exception:
        conn.rollback()
        raise

    finally:
        _pool.putconn(conn)


def ping() -> None:
    """Round-trip a trivial query; raises on any connection problem."""
    with get_conn() as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT 1;")
            cur.fetchone()
