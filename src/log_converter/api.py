"""
HTTP API for the log converter.
"""

import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, FastAPI, Query
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from . import __version__
from .config import load_env_config
from .converter import XLSX_MEDIA_TYPE, convert_to_excel, workbook_to_bytes
from .ess_client import ESSClient
from .exceptions import (
    AuthenticationError,
    FetchFailedError,
    InvalidDurationRangeError,
    LogConverterError,
    MalformedDateError,
    ProjectNotFoundError,
)
from .models import ExportParams
from .sheet_renderer import SheetStyle

EXPORT_FILENAME = "timesheet.xlsx"


class HealthStatus(BaseModel):
    status: str
    version: str


class AuthenticateRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class AuthenticateResponse(BaseModel):
    id_token: str
    employee_id: int
    employee_name: str


class RandomizeLogRequest(BaseModel):
    is_random: bool = False
    min_duration: int = 0
    max_duration: int = 0


class LogConverterRequest(BaseModel):
    employee_id: str = Field(min_length=1)
    token: str = Field(min_length=1)
    months: List[Annotated[int, Field(ge=1, le=12)]] = Field(min_length=1)
    year: int = Field(gt=0)
    project_name: str = Field(min_length=1)
    randomize_log: RandomizeLogRequest = Field(default_factory=RandomizeLogRequest)


class ProjectListResponse(BaseModel):
    projects: List[str]


def get_client() -> ESSClient:
    """Build a request-scoped ESS client from the BASE_URL environment setting."""
    ess_config = load_env_config()
    if not ess_config.base_url:
        raise FetchFailedError("BASE_URL is not configured")
    return ESSClient(ess_config.base_url)


app = FastAPI(title="Log Converter API", version=__version__)

api_v1 = APIRouter(prefix="/api/v1")


@app.exception_handler(LogConverterError)
async def log_converter_error_handler(request, exc: LogConverterError) -> JSONResponse:
    """Map conversion and fetch errors to HTTP responses."""
    if isinstance(exc, AuthenticationError):
        status_code = 401
    elif isinstance(exc, FetchFailedError):
        status_code = 502
    elif isinstance(exc, ProjectNotFoundError):
        status_code = 404
    elif isinstance(exc, (MalformedDateError, InvalidDurationRangeError)):
        status_code = 422
    else:
        status_code = 400

    logging.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=status_code, content={"error": type(exc).__name__, "message": str(exc)})


@api_v1.get("/health")
def health_check() -> HealthStatus:
    """Return health status of the API."""
    return HealthStatus(status="healthy", version=__version__)


@api_v1.post("/authenticate")
def authenticate(body: AuthenticateRequest, client: ESSClient = Depends(get_client)) -> AuthenticateResponse:
    """Log in to ESS and return the token needed by the other endpoints."""
    result = client.login(body.username, body.password)
    return AuthenticateResponse(
        id_token=result.id_token,
        employee_id=result.user_info.employee_id,
        employee_name=result.user_info.employee_name,
    )


@api_v1.post("/log-converter")
def log_converter(body: LogConverterRequest, client: ESSClient = Depends(get_client)) -> Response:
    """Fetch the requested months and return the project timesheet as an xlsx attachment."""
    params = ExportParams(
        project_filter=body.project_name,
        is_randomize_duration=body.randomize_log.is_random,
        min_duration=body.randomize_log.min_duration,
        max_duration=body.randomize_log.max_duration,
    )
    params.validate()

    client.set_token(body.token)
    activities = client.fetch_activities(body.employee_id, body.months, body.year)
    workbook = convert_to_excel(activities, params, SheetStyle())

    return Response(
        content=workbook_to_bytes(workbook),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={EXPORT_FILENAME}"},
    )


@api_v1.get("/projects")
def projects(employee_id: str = Query(min_length=1), token: str = Query(min_length=1),
             client: ESSClient = Depends(get_client)) -> ProjectListResponse:
    """Return the employee's current and previous project names."""
    client.set_token(token)
    return ProjectListResponse(projects=sorted(client.project_list(employee_id)))


app.include_router(api_v1)
