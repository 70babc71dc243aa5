"""
PULSEBOARD DATA MODELS
Project and status update records shared by storage, API and newsletter
"""

from datetime import datetime, timezone
from typing import Dict, Any, List
from dataclasses import dataclass, field, asdict
from enum import Enum


# =============================================================================
# ENUMERATIONS
# =============================================================================

class ProjectStatus(str, Enum):
    """Lifecycle status of a project"""
    IN_PROGRESS = "In Progress"
    ON_HOLD = "On Hold"
    COMPLETED = "Completed"
    ARCHIVED = "Archived"


class ProjectType(str, Enum):
    """Category label of a project"""
    INFRASTRUCTURE = "Infrastructure"
    FRONTEND = "Frontend"
    BACKEND = "Backend"
    MOBILE = "Mobile"
    DATA = "Data"
    SECURITY = "Security"
    DEVOPS = "DevOps"


PROJECT_STATUSES = [s.value for s in ProjectStatus]
PROJECT_TYPES = [t.value for t in ProjectType]

# Fields a client may set; id and created_at are always server-assigned
PROJECT_FIELDS = [
    "title",
    "project_type",
    "status",
    "solution_architect",
    "project_lead",
    "team_members",
    "stakeholders",
    "wiki_link",
    "useful_links",
    "modified_date",
]

STATUS_UPDATE_FIELDS = ["project_id", "content", "commenter"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """Parse a stored timestamp (datetime or ISO string) into an aware UTC datetime"""
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def _as_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


# =============================================================================
# RECORDS
# =============================================================================

@dataclass
class Project:
    """A tracked initiative with ownership and classification metadata"""
    id: str
    title: str
    project_type: str
    solution_architect: str
    project_lead: str
    status: str = ProjectStatus.IN_PROGRESS.value
    team_members: str = ""
    stakeholders: str = ""
    wiki_link: str = ""
    useful_links: str = ""
    modified_date: str = ""
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        self.status = _as_value(self.status)
        self.project_type = _as_value(self.project_type)

    @property
    def is_archived(self) -> bool:
        return self.status == ProjectStatus.ARCHIVED.value

    def team_member_list(self) -> List[str]:
        """Team members as a list of trimmed names"""
        return [m.strip() for m in (self.team_members or "").split(",") if m.strip()]

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["created_at"] = self.created_at.isoformat()
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        """Build a Project from a stored row, ignoring unknown columns"""
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            project_type=data.get("project_type") or "",
            solution_architect=data.get("solution_architect") or "",
            project_lead=data.get("project_lead") or "",
            status=data.get("status") or ProjectStatus.IN_PROGRESS.value,
            team_members=data.get("team_members") or "",
            stakeholders=data.get("stakeholders") or "",
            wiki_link=data.get("wiki_link") or "",
            useful_links=data.get("useful_links") or "",
            modified_date=data.get("modified_date") or "",
            created_at=parse_timestamp(data["created_at"]),
        )


@dataclass
class StatusUpdate:
    """A timestamped free-text note attached to a project"""
    id: str
    project_id: str
    content: str
    commenter: str
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["created_at"] = self.created_at.isoformat()
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StatusUpdate":
        return cls(
            id=str(data["id"]),
            project_id=str(data["project_id"]),
            content=data.get("content") or "",
            commenter=data.get("commenter") or "",
            created_at=parse_timestamp(data["created_at"]),
        )


def newest_first(records: List[Any]) -> List[Any]:
    """Sort records by created_at descending; ties keep their input order"""
    return sorted(records, key=lambda r: r.created_at, reverse=True)
