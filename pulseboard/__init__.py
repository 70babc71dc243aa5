"""
Pulseboard Project Status Tracker
Projects, timestamped status updates and an AI-written monthly newsletter

Modules:
- models: Project and StatusUpdate records, status and type enumerations
- storage: Memory, SQLite and Supabase storage behind one interface
- newsletter: 30-day digest composition and newsletter generation
- refine: Best-effort spelling and grammar cleanup for status updates
- generation: Claude text generation collaborator
- api: FastAPI endpoints (import pulseboard.api to build the app)

Quick Start:
    from pulseboard import get_settings, get_storage, seed_storage, TextGenerator, generate_newsletter

    storage = get_storage()
    seed_storage(storage)

    project = storage.create_project({
        "title": "Payments Platform Migration",
        "project_type": "Infrastructure",
        "solution_architect": "Priya Raman",
        "project_lead": "Marcus Chen",
    })
    storage.create_status_update({
        "project_id": project.id,
        "content": "Cut over the first region.",
        "commenter": "Marcus Chen",
    })

    newsletter = generate_newsletter(storage, TextGenerator.from_settings(get_settings()))
    print(newsletter.content)

Environment Variables:
    ANTHROPIC_API_KEY           - Claude API key (refinement and newsletter)
    ANTHROPIC_MODEL             - Claude model name
    GENERATION_TIMEOUT_SECONDS  - Timeout for one Claude call (default 30)
    PULSEBOARD_STORAGE          - memory, sqlite or supabase
    PULSEBOARD_SQLITE_PATH      - SQLite database file
    SUPABASE_URL                - Supabase project URL
    SUPABASE_KEY                - Supabase anon/service key
    PULSEBOARD_SEED_DATA        - Seed demo projects into an empty store
"""

__version__ = "1.0.0"

from .config import Settings, get_settings

from .models import (
    Project,
    StatusUpdate,
    ProjectStatus,
    ProjectType,
    PROJECT_STATUSES,
    PROJECT_TYPES,
)

from .storage import (
    BaseStorage,
    MemoryStorage,
    SQLiteStorage,
    SupabaseStorage,
    get_storage,
    seed_storage,
    SCHEMA_SQL,
)

from .generation import TextGenerator

from .newsletter import (
    NewsletterReport,
    GeneratedNewsletter,
    compose_report,
    generate_newsletter,
)

from .refine import RefinementResult, refine_status_text

__all__ = [
    # Config
    "Settings",
    "get_settings",

    # Models
    "Project",
    "StatusUpdate",
    "ProjectStatus",
    "ProjectType",
    "PROJECT_STATUSES",
    "PROJECT_TYPES",

    # Storage
    "BaseStorage",
    "MemoryStorage",
    "SQLiteStorage",
    "SupabaseStorage",
    "get_storage",
    "seed_storage",
    "SCHEMA_SQL",

    # Generation
    "TextGenerator",
    "NewsletterReport",
    "GeneratedNewsletter",
    "compose_report",
    "generate_newsletter",
    "RefinementResult",
    "refine_status_text",
]
