"""
PULSEBOARD API LAYER
FastAPI endpoints for projects, status updates, text refinement and the monthly newsletter
"""

from datetime import datetime
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
import logging

from .config import Settings, get_settings
from .generation import TextGenerator
from .models import ProjectStatus, ProjectType
from .newsletter import generate_newsletter
from .refine import refine_status_text
from .shared.resilience import (
    ServiceNotConfiguredError,
    ServiceUnavailableError,
    get_system_status,
)
from .storage import BaseStorage, get_storage, seed_storage

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

PROJECT_NOT_FOUND = "Project not found"


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class ProjectInput(BaseModel):
    title: str
    project_type: ProjectType
    status: ProjectStatus = ProjectStatus.IN_PROGRESS
    solution_architect: str
    project_lead: str
    team_members: str = ""
    stakeholders: str = ""
    wiki_link: str = ""
    useful_links: str = ""
    modified_date: str = ""

class ProjectReplace(ProjectInput):
    status: Optional[ProjectStatus] = None  # None = keep current status

class StatusChange(BaseModel):
    status: ProjectStatus

class StatusUpdateInput(BaseModel):
    content: str
    commenter: str

class RefineRequest(BaseModel):
    text: Optional[str] = None

class ProjectResponse(BaseModel):
    id: str
    title: str
    project_type: str
    status: str
    solution_architect: str
    project_lead: str
    team_members: str
    stakeholders: str
    wiki_link: str
    useful_links: str
    modified_date: str
    created_at: datetime

class StatusUpdateResponse(BaseModel):
    id: str
    project_id: str
    content: str
    commenter: str
    created_at: datetime

class RefineResponse(BaseModel):
    refined: str
    message: Optional[str] = None

class NewsletterResponse(BaseModel):
    newsletter: str
    generated_at: datetime
    project_count: int
    update_count: int


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_store(request: Request) -> BaseStorage:
    return request.app.state.storage


def get_generator(request: Request) -> TextGenerator:
    return request.app.state.generator


def require_project(project_id: str, storage: BaseStorage = Depends(get_store)):
    project = storage.get_project(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail=PROJECT_NOT_FOUND)
    return project


# =============================================================================
# ERROR HANDLERS
# =============================================================================

def validation_message(request: Request) -> str:
    """Generic client-facing message for a malformed request body"""
    path = request.url.path.rstrip("/")
    if path == "/api/refine-text":
        return "Text is required"
    if path.endswith("/statuses"):
        return "Invalid status update data"
    if path.endswith("/status"):
        return "Invalid status value"
    return "Invalid project data"


async def request_validation_handler(request: Request, exc: RequestValidationError):
    message = validation_message(request)
    logger.info(f"{request.method} {request.url.path} rejected: {message} ({len(exc.errors())} errors)")
    return JSONResponse(status_code=400, content={"detail": message})


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# =============================================================================
# API ENDPOINTS
# =============================================================================

def register_routes(app: FastAPI):

    @app.get("/")
    def root():
        return {
            "service": "Pulseboard Project Status Tracker",
            "version": app.version,
            "status": "operational",
            "endpoints": {
                "projects": "GET/POST /api/projects - List or create projects",
                "project": "GET/PATCH /api/projects/{id} - Read or replace a project",
                "project_status": "PATCH /api/projects/{id}/status - Change a project's status",
                "statuses": "GET/POST /api/projects/{id}/statuses - Status updates for a project",
                "all_statuses": "GET /api/all-statuses - Every status update, newest first",
                "refine": "POST /api/refine-text - Clean up status update text",
                "newsletter": "GET /api/newsletter - Generate the monthly newsletter",
            },
        }

    # -------------------------------------------------------------------------
    # PROJECTS
    # -------------------------------------------------------------------------

    @app.get("/api/projects", response_model=List[ProjectResponse])
    def list_projects(storage: BaseStorage = Depends(get_store)):
        """All projects, most recently created first"""
        return [p.to_dict() for p in storage.list_projects()]

    @app.get("/api/projects/{project_id}", response_model=ProjectResponse)
    def get_project(project=Depends(require_project)):
        return project.to_dict()

    @app.post("/api/projects", response_model=ProjectResponse, status_code=201)
    def create_project(body: ProjectInput, storage: BaseStorage = Depends(get_store)):
        try:
            project = storage.create_project(body.model_dump())
        except ValueError as e:
            logger.info(f"Project rejected: {e}")
            raise HTTPException(status_code=400, detail="Invalid project data")
        return project.to_dict()

    @app.patch("/api/projects/{project_id}", response_model=ProjectResponse)
    def replace_project(project_id: str, body: ProjectReplace, storage: BaseStorage = Depends(get_store)):
        """
        Replace every editable field of a project.

        Optional fields left out of the body are cleared. id and created_at
        never change; status is kept when omitted.
        """
        try:
            project = storage.update_project(project_id, body.model_dump())
        except ValueError as e:
            logger.info(f"Project update rejected: {e}")
            raise HTTPException(status_code=400, detail="Invalid project data")
        if project is None:
            raise HTTPException(status_code=404, detail=PROJECT_NOT_FOUND)
        return project.to_dict()

    @app.patch("/api/projects/{project_id}/status", response_model=ProjectResponse)
    def change_project_status(project_id: str, body: StatusChange, storage: BaseStorage = Depends(get_store)):
        try:
            project = storage.set_project_status(project_id, body.status)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid status value")
        if project is None:
            raise HTTPException(status_code=404, detail=PROJECT_NOT_FOUND)
        return project.to_dict()

    # -------------------------------------------------------------------------
    # STATUS UPDATES
    # -------------------------------------------------------------------------

    @app.get("/api/all-statuses", response_model=List[StatusUpdateResponse])
    def list_all_statuses(storage: BaseStorage = Depends(get_store)):
        return [u.to_dict() for u in storage.list_all_status_updates()]

    @app.get("/api/projects/{project_id}/statuses", response_model=List[StatusUpdateResponse])
    def list_project_statuses(project_id: str, storage: BaseStorage = Depends(get_store)):
        """Status updates for one project; an unknown id yields an empty list"""
        return [u.to_dict() for u in storage.list_status_updates_for_project(project_id)]

    @app.post("/api/projects/{project_id}/statuses", response_model=StatusUpdateResponse, status_code=201)
    def create_status_update(
        body: StatusUpdateInput,
        project=Depends(require_project),
        storage: BaseStorage = Depends(get_store),
    ):
        try:
            update = storage.create_status_update({
                "project_id": project.id,
                "content": body.content,
                "commenter": body.commenter,
            })
        except ValueError as e:
            logger.info(f"Status update rejected: {e}")
            raise HTTPException(status_code=400, detail="Invalid status update data")
        return update.to_dict()

    # -------------------------------------------------------------------------
    # TEXT GENERATION
    # -------------------------------------------------------------------------

    @app.post("/api/refine-text", response_model=RefineResponse)
    def refine_text(body: RefineRequest, generator: TextGenerator = Depends(get_generator)):
        """
        Clean up spelling and grammar in a draft status update.

        Returns the original text with an explanatory message when the
        generator is not configured or fails.
        """
        if not body.text or not body.text.strip():
            raise HTTPException(status_code=400, detail="Text is required")

        result = refine_status_text(generator, body.text)
        return RefineResponse(refined=result.refined, message=result.message)

    @app.get("/api/newsletter", response_model=NewsletterResponse)
    def newsletter(
        storage: BaseStorage = Depends(get_store),
        generator: TextGenerator = Depends(get_generator),
    ):
        """Generate the monthly newsletter from the last 30 days of status updates"""
        try:
            generated = generate_newsletter(storage, generator)
        except ServiceNotConfiguredError as e:
            logger.warning(f"Newsletter requested without generator: {e}")
            raise HTTPException(
                status_code=400,
                detail="Newsletter generation is not configured. Set ANTHROPIC_API_KEY.",
            )
        except ServiceUnavailableError as e:
            logger.error(f"Newsletter generation failed: {e}")
            raise HTTPException(status_code=500, detail="Failed to generate newsletter")

        return generated.to_dict()

    # -------------------------------------------------------------------------
    # HEALTH CHECK
    # -------------------------------------------------------------------------

    @app.get("/health")
    def health_check(
        storage: BaseStorage = Depends(get_store),
        generator: TextGenerator = Depends(get_generator),
    ):
        """Check system health"""
        status = {
            "api": "healthy",
            "storage": "unknown",
            "anthropic": "configured" if generator.is_available() else "not configured",
        }

        try:
            if storage.is_connected():
                status["storage"] = f"connected ({storage.backend_name})"
            else:
                status["storage"] = f"disconnected ({storage.backend_name})"
        except Exception as e:
            logger.error(f"Storage health check failed: {e}")
            status["storage"] = "error"

        status["services"] = get_system_status()
        return status


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(
    storage: Optional[BaseStorage] = None,
    generator: Optional[TextGenerator] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the Pulseboard application.

    Storage and generator are created from settings unless given. Demo data
    is seeded into an empty store when settings.seed_data is set.
    """
    settings = settings or get_settings()
    logging.getLogger().setLevel(settings.log_level)

    app = FastAPI(
        title="Pulseboard API",
        description="Project status tracking with AI-assisted updates and newsletters",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.storage = storage or get_storage(settings)
    app.state.generator = generator or TextGenerator.from_settings(settings)

    if settings.seed_data:
        seed_storage(app.state.storage)

    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    register_routes(app)

    logger.info(
        f"Pulseboard ready: storage={app.state.storage.backend_name}, "
        f"generator={'configured' if app.state.generator.is_available() else 'not configured'}"
    )
    return app


app = create_app()


# =============================================================================
# RUN SERVER
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=app.state.settings.host, port=app.state.settings.port)
