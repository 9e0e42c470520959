"""SQLite schema (code-first)."""

import logging

import aiosqlite


logger = logging.getLogger(__name__)


TABLE_SCHEMAS: dict[str, str] = {
    "profiles": """CREATE TABLE IF NOT EXISTS profiles (
        id TEXT PRIMARY KEY,
        created TEXT NOT NULL DEFAULT (datetime('now')),
        updated TEXT NOT NULL DEFAULT (datetime('now')),
        email TEXT,
        phone TEXT,
        full_name TEXT,
        notify_via TEXT CHECK (notify_via IS NULL OR notify_via IN ('email', 'sms', 'both', 'none'))
    )""",
    "tasks": """CREATE TABLE IF NOT EXISTS tasks (
        id TEXT PRIMARY KEY,
        created TEXT NOT NULL DEFAULT (datetime('now')),
        updated TEXT NOT NULL DEFAULT (datetime('now')),
        user_id TEXT NOT NULL REFERENCES profiles(id),
        title TEXT NOT NULL,
        description TEXT,
        category TEXT NOT NULL DEFAULT 'other',
        frequency_type TEXT NOT NULL
            CHECK (frequency_type IN ('daily', 'weekly', 'monthly', 'yearly', 'custom')),
        frequency_value INTEGER NOT NULL DEFAULT 1 CHECK (frequency_value >= 1),
        day_of_month INTEGER CHECK (day_of_month IS NULL OR day_of_month BETWEEN 1 AND 31),
        days_of_week TEXT,
        start_date TEXT NOT NULL,
        next_due_date TEXT NOT NULL,
        last_completed_at TEXT,
        last_notified_at TEXT,
        notify_via TEXT CHECK (notify_via IS NULL OR notify_via IN ('email', 'sms', 'both', 'none')),
        active INTEGER NOT NULL DEFAULT 1,
        paused INTEGER NOT NULL DEFAULT 0,
        snoozed_until TEXT,
        completion_token TEXT UNIQUE
    )""",
    "task_completions": """CREATE TABLE IF NOT EXISTS task_completions (
        id TEXT PRIMARY KEY,
        created TEXT NOT NULL DEFAULT (datetime('now')),
        task_id TEXT NOT NULL REFERENCES tasks(id),
        user_id TEXT NOT NULL REFERENCES profiles(id),
        completed_at TEXT NOT NULL,
        notes TEXT
    )""",
    "task_pauses": """CREATE TABLE IF NOT EXISTS task_pauses (
        id TEXT PRIMARY KEY,
        created TEXT NOT NULL DEFAULT (datetime('now')),
        task_id TEXT NOT NULL REFERENCES tasks(id),
        user_id TEXT NOT NULL REFERENCES profiles(id),
        paused_at TEXT NOT NULL,
        resumed_at TEXT,
        reason TEXT
    )""",
}

INDEXES: list[str] = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_user_id ON tasks (user_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_next_due_date ON tasks (next_due_date)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_active_paused ON tasks (active, paused)",
    "CREATE INDEX IF NOT EXISTS idx_task_completions_task_id ON task_completions (task_id)",
    "CREATE INDEX IF NOT EXISTS idx_task_pauses_task_id ON task_pauses (task_id)",
]


async def init_schema(conn: aiosqlite.Connection) -> None:
    """Create all tables and indexes if they do not already exist."""
    for table_name, ddl in TABLE_SCHEMAS.items():
        await conn.execute(ddl)
        logger.debug("Ensured table exists", extra={"table": table_name})

    for index_sql in INDEXES:
        await conn.execute(index_sql)

    await conn.commit()
    logger.info("Database schema initialized", extra={"tables": list(TABLE_SCHEMAS)})
