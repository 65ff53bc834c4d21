import os
import sqlite3

DB_PATH = os.getenv("DB_PATH", "./data/usage.sqlite")

def _connect():
    db_dir = os.path.dirname(DB_PATH)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)
    return sqlite3.connect(DB_PATH, check_same_thread=False)

def init_db():
    conn = _connect()
    cur = conn.cursor()

    cur.execute("""
    CREATE TABLE IF NOT EXISTS rate_limits (
        client_key TEXT,
        window INTEGER,
        count INTEGER,
        PRIMARY KEY(client_key, window)
    )
    """)

    conn.commit()
    conn.close()

def get_window_count(client_key: str, window: int) -> int:
    conn = _connect()
    cur = conn.cursor()
    cur.execute("SELECT count FROM rate_limits WHERE client_key=? AND window=?", (client_key, window))
    row = cur.fetchone()
    conn.close()
    return row[0] if row else 0

def increment_window(client_key: str, window: int):
    conn = _connect()
    cur = conn.cursor()

    cur.execute("""
    INSERT INTO rate_limits (client_key, window, count)
    VALUES (?, ?, 1)
    ON CONFLICT(client_key, window) DO UPDATE SET count = count + 1
    """, (client_key, window))

    conn.commit()
    conn.close()

def prune_windows(before_window: int):
    conn = _connect()
    cur = conn.cursor()
    cur.execute("DELETE FROM rate_limits WHERE window < ?", (before_window,))
    conn.commit()
    conn.close()
