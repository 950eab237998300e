import logging
from typing import Annotated, List, Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from assessor.config import ConfigStore, get_settings
from assessor.constants import AVAILABLE_MODELS, FALLBACK_LADDER
from assessor.dependencies import UploadedCodeFile, get_chat_client, get_config_store
from assessor.errors import (
    DirectoryAccessError,
    NoCredential,
    NoResults,
    RemoteServiceError,
    UnsupportedPlatform,
)
from assessor.models import AnalyzeRequest, AnalyzeResponse, DirectoryManifest, Notification
from assessor.orchestrator import analyze
from assessor.scanner import scan_file_list, select_directory

settings = get_settings()
logging.basicConfig(level=settings.LOG_LEVEL)

limiter = Limiter(key_func=get_remote_address)

app = FastAPI(
    title="Code Assessment API",
    description="Scan candidate code submissions and score them with an LLM.",
    version="1.0.0",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class CredentialPayload(BaseModel):
    key: str = Field(..., description="API key for the chat-completion service.")


class ModelPayload(BaseModel):
    model: str = Field(..., description="One of the ids listed by /models.")


class DemoPayload(BaseModel):
    enabled: bool


class ScanPayload(BaseModel):
    path: Optional[str] = Field(None, description="Directory to scan. Empty means the user cancelled.")


class ScanResponse(BaseModel):
    manifest: Optional[DirectoryManifest] = None
    notifications: List[Notification] = Field(default_factory=list)


def settings_status(store: ConfigStore):
    return {
        "credential_set": store.has_credential,
        "credential_format_valid": store.credential_looks_valid,
        "model": store.model,
        "demo_mode": store.demo_mode,
    }


def scan_response(manifest: Optional[DirectoryManifest]) -> ScanResponse:
    if manifest is None:
        return ScanResponse()
    return ScanResponse(
        manifest=manifest,
        notifications=[Notification(title="Directory selected", description=manifest.summary())],
    )


# ============ Settings Endpoints ============

@app.get("/models", tags=["Settings"])
async def list_models():
    return {"models": AVAILABLE_MODELS, "fallback_ladder": list(FALLBACK_LADDER)}


@app.get("/settings", tags=["Settings"])
async def get_settings_endpoint(store: ConfigStore = Depends(get_config_store)):
    return settings_status(store)


@app.put("/settings/credential", tags=["Settings"])
async def set_credential(payload: CredentialPayload, store: ConfigStore = Depends(get_config_store)):
    if not payload.key.strip():
        raise HTTPException(status_code=400, detail="API key must not be empty")

    notifications = [Notification(title="API key set", description="Your API key will be used for code analysis.")]
    if not store.set_credential(payload.key):
        notifications.append(Notification(
            title="API key format looks unusual",
            description="OpenAI keys usually start with 'sk-'. The key will be used anyway.",
            level="warning",
        ))
    return {**settings_status(store), "notifications": notifications}


@app.delete("/settings/credential", tags=["Settings"])
async def clear_credential(store: ConfigStore = Depends(get_config_store)):
    store.clear_credential()
    return settings_status(store)


@app.put("/settings/model", tags=["Settings"])
async def set_model(payload: ModelPayload, store: ConfigStore = Depends(get_config_store)):
    try:
        store.set_model(payload.model)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return settings_status(store)


@app.put("/settings/demo", tags=["Settings"])
async def set_demo_mode(payload: DemoPayload, store: ConfigStore = Depends(get_config_store)):
    store.set_demo_mode(payload.enabled)
    return settings_status(store)


# ============ Scan Endpoints ============

@app.post("/scan", tags=["Scan"], response_model=ScanResponse)
async def scan_directory(payload: ScanPayload):
    try:
        manifest = await select_directory(payload.path, settings)
    except UnsupportedPlatform as e:
        raise HTTPException(status_code=501, detail=e.user_message)
    except DirectoryAccessError as e:
        logging.error(f"Error selecting directory: {e.detail}")
        raise HTTPException(status_code=400, detail=e.user_message)
    return scan_response(manifest)


@app.post("/scan/upload", tags=["Scan"], response_model=ScanResponse)
async def scan_upload(
    files: Annotated[List[UploadFile], File(description="Files from a directory upload control.")],
    paths: Annotated[Optional[List[str]], Form(description="Relative paths, one per file.")] = None,
):
    if paths and len(paths) != len(files):
        raise HTTPException(status_code=400, detail="Each uploaded file needs exactly one path")

    uploads = [
        UploadedCodeFile(upload, paths[i] if paths else None)
        for i, upload in enumerate(files)
    ]
    return scan_response(await scan_file_list(uploads))


# ============ Analysis Endpoint ============

@app.post("/analyze", tags=["Analysis"], response_model=AnalyzeResponse)
@limiter.limit(settings.RATE_LIMIT)
async def analyze_endpoint(
    request: Request,
    request_data: AnalyzeRequest,
    store: ConfigStore = Depends(get_config_store),
    client=Depends(get_chat_client),
):
    notifications: List[Notification] = []
    config = store.snapshot()

    try:
        results = await analyze(
            request_data.candidates,
            request_data.assessment,
            config,
            client=client,
            notify=notifications.append,
        )
    except (NoCredential, RemoteServiceError) as e:
        raise HTTPException(status_code=400, detail=e.user_message)
    except NoResults as e:
        raise HTTPException(status_code=422, detail={"message": e.user_message, "notifications": [
            n.model_dump() for n in notifications
        ]})

    notifications.append(Notification(
        title="Analysis Complete",
        description=f"{len(results)} candidate code submissions analyzed.",
    ))
    return AnalyzeResponse(results=results, notifications=notifications)
