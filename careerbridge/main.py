import time
from typing import Any, Callable, Dict, List, Optional

import structlog
import uvicorn
from fastapi import APIRouter, Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from careerbridge.config import Settings
from careerbridge.constants import FIELDS, LANGUAGE_LEVEL_LABELS, VISA_TYPES
from careerbridge.controllers.cv_tailor import CVTailorController, CVTailorView
from careerbridge.controllers.interview_coach import InterviewCoachController, InterviewView
from careerbridge.controllers.job_search import JobSearchController, JobSearchView
from careerbridge.controllers.profile import ProfileController, ProfileView
from careerbridge.errors import FileImportError
from careerbridge.logger import configure_logging
from careerbridge.models import CamelModel, Page, SavedAnalysis, UserProfile
from careerbridge.services.file_processor import FileProcessor
from careerbridge.services.model_gateway import ModelGateway
from careerbridge.services.profile_store import AnalysisStore, ProfileStore
from careerbridge.services.providers import build_provider
from careerbridge.services.storage import LocalStorage
from careerbridge.shell import NavItem, Shell

logger = structlog.get_logger(__name__)

API_VERSION = "1.0.0"

router = APIRouter()
file_processor = FileProcessor()


class PageResponse(CamelModel):
    requested: Page
    page: Page
    view: Dict[str, Any]


class SearchRequest(CamelModel):
    search_term: Optional[str] = None
    field: Optional[str] = None


class TextRequest(CamelModel):
    text: str


def get_shell(request: Request) -> Shell:
    return request.app.state.shell


def _enter(shell: Shell, page: Page):
    """Open ``page`` for a feature action; the gate may refuse it."""
    if shell.open(page) != page:
        raise HTTPException(
            status_code=403,
            detail="Please complete your profile before using this feature.",
        )
    return shell.controller


def _page_response(shell: Shell, requested: Page) -> PageResponse:
    return PageResponse(
        requested=requested,
        page=shell.current_page,
        view=shell.view().model_dump(by_alias=True, mode="json"),
    )


@router.get("/")
async def root():
    return {"message": "CareerBridge API is running"}


@router.get("/health")
async def health_check():
    return {"status": "healthy", "service": "careerbridge-api"}


@router.get("/navbar", response_model=List[NavItem])
async def navbar(shell: Shell = Depends(get_shell)):
    return shell.navbar()


@router.get("/options")
async def options():
    return {
        "fields": FIELDS,
        "visaTypes": VISA_TYPES,
        "languageLevels": [
            {"value": level.value, "label": label} for level, label in LANGUAGE_LEVEL_LABELS.items()
        ],
    }


@router.get("/pages/{page}", response_model=PageResponse)
async def navigate(page: Page, shell: Shell = Depends(get_shell)):
    await shell.navigate(page)
    return _page_response(shell, page)


@router.get("/profile", response_model=UserProfile)
async def get_profile(shell: Shell = Depends(get_shell)):
    return shell.profile


@router.patch("/profile", response_model=ProfileView)
async def update_profile(changes: Dict[str, Any], shell: Shell = Depends(get_shell)):
    controller: ProfileController = _enter(shell, Page.PROFILE)
    try:
        await controller.update(changes)
    except (ValueError, ValidationError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    return controller.view()


@router.post("/profile/complete", response_model=PageResponse)
async def complete_profile(shell: Shell = Depends(get_shell)):
    controller: ProfileController = _enter(shell, Page.PROFILE)
    target = controller.complete()
    if target is None:
        raise HTTPException(status_code=400, detail=controller.view().hint)
    await shell.navigate(target)
    return _page_response(shell, target)


@router.post("/jobs/search", response_model=JobSearchView)
async def search_jobs(body: SearchRequest, shell: Shell = Depends(get_shell)):
    controller: JobSearchController = _enter(shell, Page.JOB_SEARCH)
    await controller.search(search_term=body.search_term, field=body.field)
    return controller.view()


@router.get("/jobs/report", response_class=PlainTextResponse)
async def export_job_report(shell: Shell = Depends(get_shell)):
    controller: JobSearchController = _enter(shell, Page.JOB_SEARCH)
    report = controller.export_report()
    if report is None:
        raise HTTPException(status_code=404, detail="No search report to export yet.")
    return PlainTextResponse(
        report,
        media_type="text/markdown",
        headers={"Content-Disposition": 'attachment; filename="careerbridge-job-search.md"'},
    )


@router.put("/cv/text", response_model=CVTailorView)
async def set_cv_text(body: TextRequest, shell: Shell = Depends(get_shell)):
    controller: CVTailorController = _enter(shell, Page.CV_TAILOR)
    controller.set_cv_text(body.text)
    return controller.view()


@router.post("/cv/upload", response_model=CVTailorView)
async def upload_cv(cv_file: UploadFile = File(...), shell: Shell = Depends(get_shell)):
    """Import CV text from a PDF / DOC / DOCX file."""
    controller: CVTailorController = _enter(shell, Page.CV_TAILOR)
    try:
        text = await file_processor.extract_text(cv_file.filename or "", await cv_file.read())
    except FileImportError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not text:
        raise HTTPException(status_code=400, detail="Could not extract text from the provided file.")
    controller.set_cv_text(text)
    return controller.view()


@router.post("/cv/analyze", response_model=CVTailorView)
async def analyze_cv(shell: Shell = Depends(get_shell)):
    controller: CVTailorController = _enter(shell, Page.CV_TAILOR)
    await controller.analyze()
    return controller.view()


@router.post("/cv/save", response_model=CVTailorView)
async def save_analysis(shell: Shell = Depends(get_shell)):
    controller: CVTailorController = _enter(shell, Page.CV_TAILOR)
    await controller.save()
    return controller.view()


@router.get("/cv/saved", response_model=SavedAnalysis)
async def get_saved_analysis(shell: Shell = Depends(get_shell)):
    snapshot = shell.analysis_store.load()
    if snapshot is None:
        raise HTTPException(status_code=404, detail="No saved analysis.")
    return snapshot


@router.post("/cv/restore", response_model=CVTailorView)
async def restore_analysis(shell: Shell = Depends(get_shell)):
    controller: CVTailorController = _enter(shell, Page.CV_TAILOR)
    if not controller.restore_saved():
        raise HTTPException(status_code=404, detail="No saved analysis.")
    return controller.view()


@router.put("/cv/job-description", response_model=CVTailorView)
async def set_job_description(body: TextRequest, shell: Shell = Depends(get_shell)):
    controller: CVTailorController = _enter(shell, Page.CV_TAILOR)
    controller.set_job_description(body.text)
    return controller.view()


@router.post("/cv/cover-letter", response_model=CVTailorView)
async def generate_cover_letter(shell: Shell = Depends(get_shell)):
    controller: CVTailorController = _enter(shell, Page.CV_TAILOR)
    await controller.generate_cover_letter()
    return controller.view()


@router.get("/interview", response_model=InterviewView)
async def get_interview(shell: Shell = Depends(get_shell)):
    controller: InterviewCoachController = _enter(shell, Page.INTERVIEW_COACH)
    return controller.view()


@router.post("/interview/start", response_model=InterviewView)
async def start_interview(shell: Shell = Depends(get_shell)):
    controller: InterviewCoachController = _enter(shell, Page.INTERVIEW_COACH)
    await controller.start()
    return controller.view()


@router.post("/interview/answer", response_model=InterviewView)
async def answer_interview(body: TextRequest, shell: Shell = Depends(get_shell)):
    controller: InterviewCoachController = _enter(shell, Page.INTERVIEW_COACH)
    await controller.submit(body.text)
    return controller.view()


def create_app(
    settings: Optional[Settings] = None,
    gateway: Optional[ModelGateway] = None,
    storage: Optional[LocalStorage] = None,
    clock: Callable[[], float] = time.monotonic,
) -> FastAPI:
    """Build the API. ``gateway`` and ``storage`` can be injected (tests use stubs)."""
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level, settings.log_file)

    if gateway is None:
        gateway = ModelGateway(
            build_provider(settings),
            fast_model=settings.resolved_fast_model,
            pro_model=settings.resolved_pro_model,
        )
    storage = storage or LocalStorage(settings.storage_path)

    app = FastAPI(title="CareerBridge API", version=API_VERSION)

    # CORS middleware for frontend integration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.shell = Shell(gateway, ProfileStore(storage), AnalysisStore(storage), clock=clock)
    app.include_router(router)

    logger.info("CareerBridge API ready", provider=settings.provider, storage=str(storage.path))
    return app


def run() -> None:
    settings = Settings.from_env()
    uvicorn.run("careerbridge.main:create_app", factory=True, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
