"""
PULSEBOARD STORAGE LAYER
Project and status update persistence behind one repository interface

Backends:
- MemoryStorage: process-local dictionaries (default, demo scale)
- SQLiteStorage: local file for development
- SupabaseStorage: hosted PostgreSQL via Supabase

Tables:
- projects: tracked projects with ownership and classification metadata
- status_updates: append-only timestamped notes attached to a project
"""

import logging
import sqlite3
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

from .config import Settings, get_settings
from .models import (
    PROJECT_FIELDS,
    PROJECT_STATUSES,
    Project,
    ProjectStatus,
    StatusUpdate,
    newest_first,
    utcnow,
)
from .shared.validation import StorageValidator

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# =============================================================================
# SQL SCHEMA DEFINITIONS
# =============================================================================

SCHEMA_SQL = """
-- Tracked projects
CREATE TABLE IF NOT EXISTS projects (
    id VARCHAR(64) PRIMARY KEY,
    title TEXT NOT NULL,
    project_type VARCHAR(50) NOT NULL,
    status VARCHAR(20) NOT NULL DEFAULT 'In Progress',
    solution_architect TEXT NOT NULL,
    project_lead TEXT NOT NULL,
    team_members TEXT,
    stakeholders TEXT,
    wiki_link TEXT,
    useful_links TEXT,
    modified_date VARCHAR(50),
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    CONSTRAINT valid_status CHECK (status IN (
        'In Progress', 'On Hold', 'Completed', 'Archived'
    ))
);

-- Status updates (append-only)
CREATE TABLE IF NOT EXISTS status_updates (
    id VARCHAR(64) PRIMARY KEY,
    project_id VARCHAR(64) NOT NULL,
    content TEXT NOT NULL,
    commenter TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_projects_created ON projects(created_at DESC);
CREATE INDEX IF NOT EXISTS idx_updates_project ON status_updates(project_id);
CREATE INDEX IF NOT EXISTS idx_updates_created ON status_updates(created_at DESC);
"""


def new_id() -> str:
    return uuid.uuid4().hex


# =============================================================================
# STORAGE INTERFACE
# =============================================================================

class BaseStorage(ABC):
    """
    Repository contract shared by every backend.

    Reads return records newest-first by creation timestamp. Lookups of a
    missing project return None. Ids and timestamps are assigned here, never
    by callers.
    """

    backend_name = "base"

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or utcnow

    def is_connected(self) -> bool:
        return True

    # -------------------------------------------------------------------------
    # PROJECTS
    # -------------------------------------------------------------------------

    @abstractmethod
    def list_projects(self) -> List[Project]:
        ...

    @abstractmethod
    def get_project(self, project_id: str) -> Optional[Project]:
        ...

    @abstractmethod
    def _insert_project(self, project: Project) -> Project:
        ...

    @abstractmethod
    def _replace_project(self, project: Project) -> Optional[Project]:
        ...

    def create_project(self, fields: Dict[str, Any], created_at: Optional[datetime] = None) -> Project:
        """Create a project with a fresh id and creation timestamp"""
        data = {name: fields.get(name) for name in PROJECT_FIELDS if fields.get(name) is not None}
        data.setdefault("status", ProjectStatus.IN_PROGRESS.value)
        data = self._validated(data, "projects")

        project = Project(id=new_id(), created_at=created_at or self.clock(), **data)
        project = self._insert_project(project)
        logger.info(f"Created project {project.id}: {project.title}")
        return project

    def update_project(self, project_id: str, fields: Dict[str, Any]) -> Optional[Project]:
        """
        Replace every mutable field of a project; id and created_at are kept.

        Fields missing from ``fields`` (or None) are cleared, except status,
        which keeps its current value when omitted.
        """
        existing = self.get_project(project_id)
        if existing is None:
            return None

        data = {name: fields.get(name) if fields.get(name) is not None else "" for name in PROJECT_FIELDS}
        if fields.get("status") is None:
            data["status"] = existing.status
        data = self._validated(data, "projects")

        updated = Project(id=existing.id, created_at=existing.created_at, **data)
        return self._replace_project(updated)

    def set_project_status(self, project_id: str, status: str) -> Optional[Project]:
        """Change only the status of a project"""
        status = getattr(status, "value", status)
        if status not in PROJECT_STATUSES:
            raise ValueError(f"Invalid status value: {status!r}")

        existing = self.get_project(project_id)
        if existing is None:
            return None

        previous = existing.status
        existing.status = status
        updated = self._replace_project(existing)
        logger.info(f"Project {project_id} status: {previous} -> {status}")
        return updated

    # -------------------------------------------------------------------------
    # STATUS UPDATES
    # -------------------------------------------------------------------------

    @abstractmethod
    def list_all_status_updates(self) -> List[StatusUpdate]:
        ...

    @abstractmethod
    def list_status_updates_for_project(self, project_id: str) -> List[StatusUpdate]:
        ...

    @abstractmethod
    def _insert_status_update(self, update: StatusUpdate) -> StatusUpdate:
        ...

    def create_status_update(self, fields: Dict[str, Any], created_at: Optional[datetime] = None) -> StatusUpdate:
        """Append a status update with a fresh id and creation timestamp"""
        data = self._validated(
            {
                "project_id": fields.get("project_id"),
                "content": fields.get("content"),
                "commenter": fields.get("commenter"),
            },
            "status_updates",
        )

        update = StatusUpdate(id=new_id(), created_at=created_at or self.clock(), **data)
        update = self._insert_status_update(update)
        logger.info(f"Created status update {update.id} for project {update.project_id}")
        return update

    # -------------------------------------------------------------------------
    # HELPERS
    # -------------------------------------------------------------------------

    @staticmethod
    def _validated(data: Dict[str, Any], table_name: str) -> Dict[str, Any]:
        result = StorageValidator.validate_for_storage(data, table_name)
        if not result.valid:
            result.log_issues(prefix=f"{table_name}: ")
            raise ValueError("; ".join(result.error_messages()))
        if result.has_warnings:
            result.log_issues(prefix=f"{table_name}: ")
        return result.data

    def is_empty(self) -> bool:
        return not self.list_projects()


# =============================================================================
# IN-MEMORY STORAGE
# =============================================================================

class MemoryStorage(BaseStorage):
    """Dictionary-backed storage; contents live as long as the process"""

    backend_name = "memory"

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        super().__init__(clock)
        self._projects: Dict[str, Project] = {}
        self._updates: Dict[str, StatusUpdate] = {}
        self._lock = Lock()

    def list_projects(self) -> List[Project]:
        with self._lock:
            projects = list(self._projects.values())
        return [self._copy(p) for p in newest_first(projects)]

    def get_project(self, project_id: str) -> Optional[Project]:
        with self._lock:
            project = self._projects.get(project_id)
        return self._copy(project) if project else None

    def _insert_project(self, project: Project) -> Project:
        with self._lock:
            self._projects[project.id] = project
        return self._copy(project)

    def _replace_project(self, project: Project) -> Optional[Project]:
        with self._lock:
            if project.id not in self._projects:
                return None
            self._projects[project.id] = project
        return self._copy(project)

    def list_all_status_updates(self) -> List[StatusUpdate]:
        with self._lock:
            updates = list(self._updates.values())
        return [self._copy(u) for u in newest_first(updates)]

    def list_status_updates_for_project(self, project_id: str) -> List[StatusUpdate]:
        with self._lock:
            updates = [u for u in self._updates.values() if u.project_id == project_id]
        return [self._copy(u) for u in newest_first(updates)]

    def _insert_status_update(self, update: StatusUpdate) -> StatusUpdate:
        with self._lock:
            self._updates[update.id] = self._copy(update)
        return self._copy(update)

    @staticmethod
    def _copy(record):
        # Callers may mutate what they get back; the stored record must not change
        return type(record)(**vars(record))


# =============================================================================
# LOCAL SQLITE STORAGE
# =============================================================================

class SQLiteStorage(BaseStorage):
    """SQLite storage for local development"""

    backend_name = "sqlite"

    def __init__(self, db_path: str = "pulseboard.db", clock: Optional[Callable[[], datetime]] = None):
        super().__init__(clock)
        self.db_path = db_path
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._lock = Lock()
        self._init_tables()

    def _init_tables(self):
        """Create tables if they don't exist"""
        with self._lock:
            cursor = self.conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS projects (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    project_type TEXT NOT NULL,
                    status TEXT NOT NULL,
                    solution_architect TEXT NOT NULL,
                    project_lead TEXT NOT NULL,
                    team_members TEXT,
                    stakeholders TEXT,
                    wiki_link TEXT,
                    useful_links TEXT,
                    modified_date TEXT,
                    created_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS status_updates (
                    id TEXT PRIMARY KEY,
                    project_id TEXT NOT NULL,
                    content TEXT NOT NULL,
                    commenter TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_updates_project ON status_updates(project_id)"
            )

            self.conn.commit()

    @staticmethod
    def _timestamp(dt: datetime) -> str:
        # Fixed-width UTC strings sort chronologically
        return dt.astimezone(timezone.utc).isoformat(timespec="microseconds")

    def _query(self, sql: str, params: tuple = ()) -> List[Dict[str, Any]]:
        with self._lock:
            cursor = self.conn.cursor()
            cursor.execute(sql, params)
            return [dict(row) for row in cursor.fetchall()]

    def _execute(self, sql: str, params: tuple) -> int:
        with self._lock:
            cursor = self.conn.cursor()
            cursor.execute(sql, params)
            self.conn.commit()
            return cursor.rowcount

    def list_projects(self) -> List[Project]:
        rows = self._query("SELECT * FROM projects ORDER BY created_at DESC, rowid ASC")
        return [Project.from_dict(r) for r in rows]

    def get_project(self, project_id: str) -> Optional[Project]:
        rows = self._query("SELECT * FROM projects WHERE id = ?", (project_id,))
        return Project.from_dict(rows[0]) if rows else None

    def _insert_project(self, project: Project) -> Project:
        columns = ["id"] + PROJECT_FIELDS + ["created_at"]
        values = [project.id] + [getattr(project, c) for c in PROJECT_FIELDS]
        values.append(self._timestamp(project.created_at))

        self._execute(
            f"INSERT INTO projects ({', '.join(columns)}) VALUES ({', '.join('?' for _ in columns)})",
            tuple(values),
        )
        return project

    def _replace_project(self, project: Project) -> Optional[Project]:
        assignments = ", ".join(f"{c} = ?" for c in PROJECT_FIELDS)
        values = [getattr(project, c) for c in PROJECT_FIELDS] + [project.id]

        changed = self._execute(f"UPDATE projects SET {assignments} WHERE id = ?", tuple(values))
        return project if changed else None

    def list_all_status_updates(self) -> List[StatusUpdate]:
        rows = self._query("SELECT * FROM status_updates ORDER BY created_at DESC, rowid ASC")
        return [StatusUpdate.from_dict(r) for r in rows]

    def list_status_updates_for_project(self, project_id: str) -> List[StatusUpdate]:
        rows = self._query(
            "SELECT * FROM status_updates WHERE project_id = ? ORDER BY created_at DESC, rowid ASC",
            (project_id,),
        )
        return [StatusUpdate.from_dict(r) for r in rows]

    def _insert_status_update(self, update: StatusUpdate) -> StatusUpdate:
        self._execute(
            """
            INSERT INTO status_updates (id, project_id, content, commenter, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                update.id,
                update.project_id,
                update.content,
                update.commenter,
                self._timestamp(update.created_at),
            ),
        )
        return update

    def close(self):
        with self._lock:
            self.conn.close()


# =============================================================================
# SUPABASE STORAGE
# =============================================================================

class SupabaseStorage(BaseStorage):
    """Storage operations using Supabase/PostgreSQL (see SCHEMA_SQL)"""

    backend_name = "supabase"

    def __init__(
        self,
        url: Optional[str] = None,
        key: Optional[str] = None,
        client: Any = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(clock)
        self.url = url
        self.key = key
        self.client = client

        if self.client is None and self.url and self.key:
            try:
                from supabase import create_client
                self.client = create_client(self.url, self.key)
                logger.info("Supabase client initialized")
            except Exception as e:
                logger.error(f"Supabase connection error: {e}")

    def is_connected(self) -> bool:
        return self.client is not None

    def list_projects(self) -> List[Project]:
        result = self.client.table("projects").select("*").order("created_at", desc=True).execute()
        return [Project.from_dict(r) for r in result.data or []]

    def get_project(self, project_id: str) -> Optional[Project]:
        result = self.client.table("projects").select("*").eq("id", project_id).limit(1).execute()
        return Project.from_dict(result.data[0]) if result.data else None

    def _insert_project(self, project: Project) -> Project:
        result = self.client.table("projects").insert(project.to_dict()).execute()
        return Project.from_dict(result.data[0]) if result.data else project

    def _replace_project(self, project: Project) -> Optional[Project]:
        fields = {name: getattr(project, name) for name in PROJECT_FIELDS}
        result = self.client.table("projects").update(fields).eq("id", project.id).execute()
        return Project.from_dict(result.data[0]) if result.data else None

    def list_all_status_updates(self) -> List[StatusUpdate]:
        result = self.client.table("status_updates").select("*").order("created_at", desc=True).execute()
        return [StatusUpdate.from_dict(r) for r in result.data or []]

    def list_status_updates_for_project(self, project_id: str) -> List[StatusUpdate]:
        result = (
            self.client.table("status_updates")
            .select("*")
            .eq("project_id", project_id)
            .order("created_at", desc=True)
            .execute()
        )
        return [StatusUpdate.from_dict(r) for r in result.data or []]

    def _insert_status_update(self, update: StatusUpdate) -> StatusUpdate:
        result = self.client.table("status_updates").insert(update.to_dict()).execute()
        return StatusUpdate.from_dict(result.data[0]) if result.data else update


# =============================================================================
# SEED DATA
# =============================================================================

# (project fields, [(days ago, commenter, content), ...])
SEED_PROJECTS = [
    (
        {
            "title": "Payments Platform Migration",
            "project_type": "Infrastructure",
            "status": "In Progress",
            "solution_architect": "Priya Raman",
            "project_lead": "Marcus Chen",
            "team_members": "Alex Kim, Jordan Lee, Sam Patel",
            "stakeholders": "Payments leadership, Risk",
            "wiki_link": "https://wiki.example.com/payments-migration",
            "useful_links": "https://jira.example.com/browse/PAY-100",
            "modified_date": "2026-10-01",
        },
        [
            (2, "Marcus Chen", "Cut over the first two regions to the new ledger service. Latency is within budget."),
            (9, "Alex Kim", "Finished load testing at 3x peak volume, no errors."),
            (45, "Marcus Chen", "Kicked off migration planning with the platform team."),
        ],
    ),
    (
        {
            "title": "Merchant Dashboard Redesign",
            "project_type": "Frontend",
            "status": "On Hold",
            "solution_architect": "Dana Whitfield",
            "project_lead": "Luis Ortega",
            "team_members": "Maya Singh, Chris Doyle",
            "stakeholders": "Merchant success",
            "wiki_link": "https://wiki.example.com/merchant-dashboard",
            "useful_links": "",
            "modified_date": "2026-09-20",
        },
        [
            (14, "Luis Ortega", "Paused while design system tokens are finalized."),
        ],
    ),
    (
        {
            "title": "Fraud Signal Pipeline",
            "project_type": "Data",
            "status": "Completed",
            "solution_architect": "Priya Raman",
            "project_lead": "Hannah Brooks",
            "team_members": "Omar Farouk, Jess Taylor",
            "stakeholders": "Risk, Data science",
            "wiki_link": "",
            "useful_links": "https://jira.example.com/browse/FRD-42",
            "modified_date": "2026-08-30",
        },
        [
            (60, "Hannah Brooks", "Pipeline shipped to production and handed over to operations."),
        ],
    ),
]


def seed_storage(storage: BaseStorage) -> int:
    """Insert the demo data set into an empty store, return projects created"""
    if not storage.is_empty():
        logger.info("Storage already has projects, skipping seed data")
        return 0

    now = storage.clock()
    created = 0
    for index, (fields, updates) in enumerate(SEED_PROJECTS):
        # First entry gets the newest creation time so it lists first
        project_created = now - timedelta(days=90 + index)
        project = storage.create_project(fields, created_at=project_created)
        for days_ago, commenter, content in sorted(updates, key=lambda u: -u[0]):
            storage.create_status_update(
                {"project_id": project.id, "content": content, "commenter": commenter},
                created_at=now - timedelta(days=days_ago),
            )
        created += 1

    logger.info(f"Seeded {created} demo projects")
    return created


# =============================================================================
# STORAGE FACTORY
# =============================================================================

def get_storage(settings: Optional[Settings] = None) -> BaseStorage:
    """Get the storage backend named in settings"""
    settings = settings or get_settings()
    backend = settings.storage_backend

    if backend == "supabase":
        if settings.supabase_configured:
            storage = SupabaseStorage(settings.supabase_url, settings.supabase_key)
            if storage.is_connected():
                return storage
        logger.warning("Supabase not configured or unreachable, using in-memory storage")
        return MemoryStorage()

    if backend == "sqlite":
        logger.info(f"Using SQLite storage at {settings.sqlite_path}")
        return SQLiteStorage(settings.sqlite_path)

    logger.info("Using in-memory storage")
    return MemoryStorage()


# =============================================================================
# COMMAND LINE INTERFACE
# =============================================================================

if __name__ == "__main__":
    storage = get_storage()
    if get_settings().seed_data:
        seed_storage(storage)

    print(f"\n{'='*60}")
    print("PULSEBOARD Storage Status")
    print(f"{'='*60}")
    print(f"Backend: {storage.backend_name}")

    projects = storage.list_projects()
    updates = storage.list_all_status_updates()
    print(f"Projects: {len(projects)}")
    print(f"Status updates: {len(updates)}")
    for project in projects[:10]:
        print(f"  - [{project.status}] {project.title}")
