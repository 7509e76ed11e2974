_DDL = """
CREATE TABLE IF NOT EXISTS jobs (
    id           TEXT PRIMARY KEY,
    user_id      TEXT NOT NULL,
    company      TEXT NOT NULL,
    role         TEXT NOT NULL,
    date_applied TEXT NOT NULL,
    location     TEXT NOT NULL DEFAULT '',
    link         TEXT,
    status       TEXT NOT NULL CHECK (status IN
                     ('Applied', 'Interview', 'Offer', 'Rejected', 'Withdrawn', 'No Response')),
    notes        TEXT,
    created_at   TEXT NOT NULL,
    updated_at   TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS jobs_user_date ON jobs (user_id, date_applied);

-- job_id is a weak reference: deleting a job leaves its tasks in place.
CREATE TABLE IF NOT EXISTS tasks (
    id          TEXT PRIMARY KEY,
    user_id     TEXT NOT NULL,
    job_id      TEXT,
    title       TEXT NOT NULL,
    description TEXT,
    due_date    TEXT,
    completed   INTEGER NOT NULL DEFAULT 0,
    priority    TEXT NOT NULL DEFAULT 'Medium' CHECK (priority IN ('Low', 'Medium', 'High')),
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS tasks_user_due ON tasks (user_id, due_date);
CREATE INDEX IF NOT EXISTS tasks_job ON tasks (job_id);

CREATE TABLE IF NOT EXISTS scheduled_exports (
    id            TEXT PRIMARY KEY,
    user_id       TEXT NOT NULL,
    frequency     TEXT NOT NULL,
    last_exported TEXT,
    options       TEXT NOT NULL,
    destination   TEXT NOT NULL,
    email         TEXT
);

CREATE INDEX IF NOT EXISTS scheduled_exports_user ON scheduled_exports (user_id);
"""
