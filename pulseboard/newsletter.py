"""
PULSEBOARD NEWSLETTER MODULE
Monthly project status digest composed from recent status updates

Pipeline:
- Select the trailing 30-day window of status updates
- Group them per project, newest first
- Render a structured text report covering every project
- Hand the report to Claude with a fixed newsletter prompt
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from .models import Project, StatusUpdate, newest_first, utcnow
from .generation import TextGenerator
from .storage import BaseStorage

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

NEWSLETTER_WINDOW_DAYS = 30
MAX_UPDATES_PER_PROJECT = 5
NO_UPDATES_TEXT = f"No updates in the last {NEWSLETTER_WINDOW_DAYS} days."
EMPTY_NEWSLETTER_TEXT = "Unable to generate newsletter at this time."

NEWSLETTER_SYSTEM_PROMPT = """You are a professional newsletter writer for a project management team.
Your task is to create a comprehensive monthly project status newsletter.

Format the newsletter with:
1. **Executive Summary**: Brief overview of all active projects and key highlights
2. **Project Updates**: For each project, provide:
   - Project name and type
   - Current status
   - Key accomplishments and progress from the last month
   - Notable updates or blockers
3. **Key Highlights**: Bullet points of major achievements across all projects
4. **Next Steps**: High-level action items and focus areas

Use a professional, informative tone. Keep it concise but comprehensive.
Format using clear headings, bullet points, and paragraphs for readability.
Make sure the content is suitable for executive-level stakeholders.
Only report what the data says; do not invent progress, dates or people."""


# =============================================================================
# DATA MODELS
# =============================================================================

@dataclass
class ProjectDigest:
    """One project's section of the report"""
    project: Project
    updates: List[StatusUpdate] = field(default_factory=list)

    def to_text(self) -> str:
        p = self.project
        lines = [
            f"Project: {p.title}",
            f"Type: {p.project_type}",
            f"Status: {p.status}",
            f"Solution Architect: {p.solution_architect}",
            f"Project Lead: {p.project_lead}",
            f"Team Members: {', '.join(p.team_member_list()) or 'None listed'}",
        ]

        if self.updates:
            lines.append("Recent Updates:")
            for update in self.updates:
                local_date = update.created_at.astimezone().date().isoformat()
                lines.append(f"  - [{local_date}] {update.content}")
        else:
            lines.append(NO_UPDATES_TEXT)

        return "\n".join(lines)


@dataclass
class NewsletterReport:
    """Structured report handed to the text generator"""
    generated_at: datetime
    window_start: datetime
    sections: List[ProjectDigest] = field(default_factory=list)
    active_project_count: int = 0
    update_count: int = 0

    def to_text(self) -> str:
        lines = [
            f"Total Active Projects: {self.active_project_count}",
            f"Status Updates in Last {NEWSLETTER_WINDOW_DAYS} Days: {self.update_count}",
            f"Reporting Period: {self.window_start.date().isoformat()} to {self.generated_at.date().isoformat()}",
            "",
        ]

        for section in self.sections:
            lines.append(section.to_text())
            lines.append("---")

        return "\n".join(lines)


@dataclass
class GeneratedNewsletter:
    """Newsletter text returned by the generator"""
    content: str
    report: NewsletterReport
    generated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "newsletter": self.content,
            "generated_at": self.generated_at.isoformat(),
            "project_count": self.report.active_project_count,
            "update_count": self.report.update_count,
        }


# =============================================================================
# REPORT COMPOSITION
# =============================================================================

def newsletter_window_start(now: datetime, days: int = NEWSLETTER_WINDOW_DAYS) -> datetime:
    return now - timedelta(days=days)


def filter_recent_updates(
    updates: List[StatusUpdate],
    window_start: datetime,
) -> List[StatusUpdate]:
    """Keep updates created at or after window_start"""
    return [u for u in updates if u.created_at >= window_start]


def group_updates_by_project(updates: List[StatusUpdate]) -> Dict[str, List[StatusUpdate]]:
    """Group updates by project id, newest first within each group"""
    by_project: Dict[str, List[StatusUpdate]] = defaultdict(list)
    for update in newest_first(updates):
        by_project[update.project_id].append(update)
    return dict(by_project)


def compose_report(
    projects: List[Project],
    updates: List[StatusUpdate],
    now: Optional[datetime] = None,
) -> NewsletterReport:
    """
    Build the newsletter report for every project.

    Args:
        projects: All projects, in the order they should appear
        updates: All status updates (any order, any age)
        now: Reference instant for the 30-day window (default: current time)
    """
    now = now or utcnow()
    window_start = newsletter_window_start(now)

    recent = filter_recent_updates(updates, window_start)
    by_project = group_updates_by_project(recent)

    sections = [
        ProjectDigest(
            project=project,
            updates=by_project.get(project.id, [])[:MAX_UPDATES_PER_PROJECT],
        )
        for project in projects
    ]

    return NewsletterReport(
        generated_at=now,
        window_start=window_start,
        sections=sections,
        active_project_count=sum(1 for p in projects if not p.is_archived),
        update_count=len(recent),
    )


# =============================================================================
# NEWSLETTER GENERATION
# =============================================================================

def build_report_for_storage(storage: BaseStorage, now: Optional[datetime] = None) -> NewsletterReport:
    return compose_report(
        storage.list_projects(),
        storage.list_all_status_updates(),
        now=now or storage.clock(),
    )


def generate_newsletter(
    storage: BaseStorage,
    generator: TextGenerator,
    now: Optional[datetime] = None,
) -> GeneratedNewsletter:
    """
    Compose the report from storage and have Claude write the newsletter.

    Generator errors (ServiceNotConfiguredError, ServiceUnavailableError)
    propagate unchanged; no partially composed text is returned.
    """
    report = build_report_for_storage(storage, now)
    logger.info(
        f"Generating newsletter: {len(report.sections)} projects, "
        f"{report.update_count} updates since {report.window_start.date().isoformat()}"
    )

    content = generator.generate(
        NEWSLETTER_SYSTEM_PROMPT,
        "Generate a monthly project status newsletter based on the following data:\n\n"
        + report.to_text(),
        max_tokens=4000,
    )

    if not content:
        logger.warning("Generator returned an empty newsletter")
        content = EMPTY_NEWSLETTER_TEXT

    return GeneratedNewsletter(content=content, report=report)


# =============================================================================
# CLI
# =============================================================================

if __name__ == "__main__":
    import argparse

    from .config import get_settings
    from .storage import get_storage, seed_storage

    parser = argparse.ArgumentParser(description="Generate the monthly project status newsletter")
    parser.add_argument("--output", "-o", help="Output file path")
    parser.add_argument("--report-only", action="store_true", help="Print the structured report without calling Claude")

    args = parser.parse_args()

    settings = get_settings()
    storage = get_storage(settings)
    if settings.seed_data:
        seed_storage(storage)

    if args.report_only:
        output = build_report_for_storage(storage).to_text()
    else:
        generator = TextGenerator.from_settings(settings)
        if not generator.is_available():
            print("Error: newsletter generator not available. Check ANTHROPIC_API_KEY.")
            raise SystemExit(1)
        output = generate_newsletter(storage, generator).content

    if args.output:
        with open(args.output, "w") as f:
            f.write(output)
        print(f"Newsletter written to {args.output}")
    else:
        print(output)
