from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from io import StringIO
from typing import Any, Dict, List, Literal, Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, Query, Response, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from rich.console import Console

from langchain_openai import AzureChatOpenAI, ChatOpenAI
from openai import AzureOpenAI, OpenAI

from code_roaster.config import Settings, log_environment_problems, settings
from code_roaster.files import format_file_size, prepare_upload
from code_roaster.models import BookmarkFilter, BookmarkSort, HistoryFilter
from code_roaster.review import (
    REVIEW_TYPE_OPTIONS,
    CodeReviewError,
    InvalidApiKeyError,
    InvalidReviewTypeError,
    LangChainReviewAgent,
    QuotaExceededError,
    ServiceNotConnectedError,
)
from code_roaster.services import ReviewService
from code_roaster.storage import (
    BookmarkStore,
    HistoryStore,
    LocalStorage,
    SearchHistory,
    StoreItemNotFoundError,
    filter_history,
    history_stats,
)
from code_roaster.storage.bookmark_store import (
    available_languages,
    available_tags,
    bookmark_stats,
    categories_with_counts,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    log_environment_problems(get_settings())
    yield


app = FastAPI(
    title="Code Roaster API",
    description="Review uploaded source files with an OpenAI chat model",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


BookmarkCategory = Literal["best-practices", "security", "performance", "bugs", "documentation"]


class CodeExampleModel(BaseModel):
    wrong: str = ""
    correct: str = ""


class BookmarkCreate(BaseModel):
    title: str = Field(..., min_length=1)
    category: BookmarkCategory
    language: str
    description: str = ""
    codeExample: CodeExampleModel = Field(default_factory=CodeExampleModel)
    tags: List[str] = Field(default_factory=list)
    source: Optional[Literal["from-review", "manual-add", "preset"]] = "manual-add"
    isBookmarked: Optional[bool] = None
    canAutoFix: Optional[bool] = None

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Use parameterized queries",
                "category": "security",
                "language": "python",
                "description": "Never build SQL by string concatenation.",
                "codeExample": {
                    "wrong": "cursor.execute(f'SELECT * FROM users WHERE id = {user_id}')",
                    "correct": "cursor.execute('SELECT * FROM users WHERE id = %s', (user_id,))",
                },
                "tags": ["sql", "injection"],
            }
        }


class BookmarkUpdate(BaseModel):
    title: Optional[str] = None
    category: Optional[BookmarkCategory] = None
    language: Optional[str] = None
    description: Optional[str] = None
    codeExample: Optional[CodeExampleModel] = None
    tags: Optional[List[str]] = None
    usageCount: Optional[int] = Field(None, ge=0)
    source: Optional[Literal["from-review", "manual-add", "preset"]] = None
    isBookmarked: Optional[bool] = None
    canAutoFix: Optional[bool] = None


class SearchTermRequest(BaseModel):
    term: str


class TextReviewResponse(BaseModel):
    success: bool
    file_count: int
    output: str


@lru_cache
def get_settings() -> Settings:
    return settings


@lru_cache
def get_storage() -> LocalStorage:
    return LocalStorage(get_settings().storage_path)


@lru_cache
def get_history_store() -> HistoryStore:
    return HistoryStore(get_storage(), limit=get_settings().history_limit)


@lru_cache
def get_bookmark_store() -> BookmarkStore:
    return BookmarkStore(get_storage())


@lru_cache
def get_search_history() -> SearchHistory:
    return SearchHistory(get_storage(), limit=get_settings().search_history_limit)


@lru_cache
def get_review_service() -> ReviewService:
    return _build_service(get_settings(), get_history_store())


def _build_llm(cfg: Settings) -> ChatOpenAI:
    if cfg.llm_provider == "azure-openai":
        required = {
            "AZURE_OPENAI_API_KEY": cfg.azure_openai_api_key,
            "AZURE_OPENAI_ENDPOINT": cfg.azure_openai_endpoint,
            "AZURE_OPENAI_DEPLOYMENT": cfg.azure_openai_deployment,
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ValueError("Missing Azure OpenAI configuration. Please set: " + ", ".join(missing))

        return AzureChatOpenAI(
            azure_deployment=cfg.azure_openai_deployment,
            azure_endpoint=cfg.azure_openai_endpoint,
            api_version=cfg.azure_openai_api_version,
            api_key=cfg.azure_openai_api_key,
            temperature=cfg.openai_temperature,
            max_tokens=cfg.max_output_tokens,
        )

    return ChatOpenAI(
        model=cfg.openai_model,
        api_key=cfg.openai_api_key,
        temperature=cfg.openai_temperature,
        max_tokens=cfg.max_output_tokens,
    )


def _build_client(cfg: Settings) -> OpenAI:
    """SDK client used only for the connectivity check."""
    if cfg.llm_provider == "azure-openai":
        return AzureOpenAI(
            api_key=cfg.azure_openai_api_key,
            azure_endpoint=cfg.azure_openai_endpoint or "",
            api_version=cfg.azure_openai_api_version,
        )
    return OpenAI(api_key=cfg.openai_api_key)


def _build_service(cfg: Settings, history: Optional[HistoryStore] = None) -> ReviewService:
    agent = LangChainReviewAgent(
        model=cfg.openai_model,
        temperature=cfg.openai_temperature,
        max_output_tokens=cfg.max_output_tokens,
        llm=_build_llm(cfg),
        client=_build_client(cfg),
    )
    return ReviewService(agent, model=cfg.openai_model, max_tokens=cfg.max_output_tokens, history=history)


def _service_or_503() -> ReviewService:
    try:
        return get_review_service()
    except ValueError as exc:
        raise HTTPException(status_code=503, detail=f"Configuration error: {exc}")
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Failed to initialize service: {exc}")


def _raise_for_review_error(exc: CodeReviewError) -> None:
    if isinstance(exc, InvalidReviewTypeError):
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if isinstance(exc, ServiceNotConnectedError):
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    if isinstance(exc, InvalidApiKeyError):
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    if isinstance(exc, QuotaExceededError):
        raise HTTPException(status_code=429, detail=str(exc)) from exc
    raise HTTPException(status_code=502, detail=str(exc)) from exc


@app.get("/")
async def root(cfg: Settings = Depends(get_settings)):
    return {
        "message": f"{cfg.app_name} API",
        "version": cfg.app_version,
        "endpoints": {
            "POST /review": "Upload source files for review",
            "GET /review-types": "List available review types",
            "POST /best-practices": "Generate best practices for a language",
            "GET /status": "Check OpenAI connectivity",
            "GET /history": "List past reviews",
            "GET /history/export": "Download review history as JSON",
            "GET /bookmarks": "List bookmarks",
            "GET /search-history": "Recent bookmark searches",
            "GET /health": "Check API health",
        },
    }


@app.get("/health")
async def health():
    return {"status": "healthy"}


@app.get("/status")
async def status(refresh: bool = Query(False, description="Re-run the connectivity check")):
    service = _service_or_503()
    if refresh or not service.is_connected:
        connection = await run_in_threadpool(service.check_connection)
    else:
        connection = None
    return {
        **service.connection_status(),
        "connection": connection.to_dict() if connection else None,
    }


@app.get("/review-types")
async def review_types():
    return {"reviewTypes": REVIEW_TYPE_OPTIONS}


@app.post("/review")
async def review_upload(
    files: List[UploadFile] = File(..., description="Source files to review"),
    review_type: str = Form("codeQuality", description="Review type key"),
    format: str = Form("json", description="Output format: 'json' or 'text'"),
    cfg: Settings = Depends(get_settings),
):
    """
    Review uploaded source files with a single model call.

    One history item is recorded per file. Only the first files up to the
    configured limit are processed.
    """
    if not files:
        raise HTTPException(status_code=400, detail="At least one file is required")
    if len(files) > cfg.max_files_per_review:
        logger.warning(
            "Received %d files, only the first %d will be processed", len(files), cfg.max_files_per_review
        )

    uploaded = []
    for upload in files[: cfg.max_files_per_review]:
        data = await upload.read()
        if not data:
            raise HTTPException(status_code=400, detail=f"File is empty: {upload.filename}")
        uploaded.append(
            prepare_upload(
                upload.filename or "untitled",
                data,
                size_limit=cfg.max_file_size,
                small_file_threshold=cfg.small_file_threshold,
            )
        )

    service = _service_or_503()
    try:
        result = await run_in_threadpool(service.review_files, uploaded, review_type)
    except CodeReviewError as exc:
        _raise_for_review_error(exc)

    if format.lower() == "text":
        output = StringIO()
        console = Console(file=output, width=cfg.console_width, force_terminal=True)
        service.render_console_summary(result, uploaded, console=console)
        return TextReviewResponse(success=True, file_count=len(uploaded), output=output.getvalue())

    return {
        "success": True,
        "fileCount": len(uploaded),
        "files": [
            {
                "id": f.id,
                "name": f.name,
                "size": f.size,
                "sizeLabel": format_file_size(
                    f.size,
                    show_indicator=True,
                    size_limit=cfg.max_file_size,
                    compress_threshold=cfg.compress_threshold,
                ),
                "extension": f.extension,
                "preprocessed": f.preprocessed,
            }
            for f in uploaded
        ],
        "result": result.to_dict(),
    }


@app.post("/best-practices")
async def best_practices(language: str = Form(..., description="Programming language")):
    service = _service_or_503()
    try:
        content = await run_in_threadpool(service.generate_best_practices, language)
    except CodeReviewError as exc:
        _raise_for_review_error(exc)
    return {"language": language, "content": content}


@app.get("/history")
async def list_history(
    search: str = Query("", description="Matches file names and suggestion titles/descriptions"),
    language: str = Query("all"),
    review_type: str = Query("all"),
    severity: str = Query("all"),
    date_range: Literal["all", "today", "week", "month"] = Query("all"),
    store: HistoryStore = Depends(get_history_store),
):
    history_filter = HistoryFilter(
        search_term=search,
        language=language,
        review_type=review_type,
        severity=severity,
        date_range=date_range,
    )
    items = filter_history(store.items, history_filter)
    return {"total": len(store.items), "items": [item.to_dict() for item in items]}


@app.get("/history/stats")
async def get_history_stats(store: HistoryStore = Depends(get_history_store)):
    return history_stats(store.items).to_dict()


@app.get("/history/export")
async def export_history(store: HistoryStore = Depends(get_history_store)):
    filename, payload = store.export()
    return Response(
        content=payload,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.post("/history/refresh")
async def refresh_history(store: HistoryStore = Depends(get_history_store)):
    items = store.refresh()
    return {"total": len(items), "items": [item.to_dict() for item in items]}


@app.get("/history/{item_id}")
async def get_history_item(item_id: str, store: HistoryStore = Depends(get_history_store)):
    item = store.get(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail=f"History item not found: {item_id}")
    return item.to_dict()


@app.delete("/history/{item_id}")
async def delete_history_item(item_id: str, store: HistoryStore = Depends(get_history_store)):
    if not store.delete(item_id):
        raise HTTPException(status_code=404, detail=f"History item not found: {item_id}")
    return {"success": True, "deleted": item_id}


@app.delete("/history")
async def clear_history(
    confirm: bool = Query(False, description="Must be true to clear all history"),
    store: HistoryStore = Depends(get_history_store),
):
    pending = store.clear(skip_confirmation=confirm)
    if pending is not None:
        raise HTTPException(status_code=409, detail="Clearing history requires confirm=true")
    return {"success": True}


@app.get("/bookmarks")
async def list_bookmarks(
    category: str = Query("all"),
    language: str = Query("all"),
    search: str = Query(""),
    tags: Optional[List[str]] = Query(None, description="Every tag must match"),
    sort: Literal["title", "dateAdded", "usageCount", "category", "language"] = Query("dateAdded"),
    direction: Literal["asc", "desc"] = Query("desc"),
    store: BookmarkStore = Depends(get_bookmark_store),
):
    bookmark_filter = BookmarkFilter(category=category, language=language, search_term=search, tags=tags or [])
    items = store.query(bookmark_filter, BookmarkSort(field=sort, direction=direction))
    return {"total": len(store.items), "items": [item.to_dict() for item in items]}


@app.get("/bookmarks/categories")
async def bookmark_categories(store: BookmarkStore = Depends(get_bookmark_store)):
    items = store.items
    return {
        "categories": categories_with_counts(items),
        "languages": available_languages(items),
        "tags": available_tags(items),
    }


@app.get("/bookmarks/stats")
async def get_bookmark_stats(store: BookmarkStore = Depends(get_bookmark_store)):
    return bookmark_stats(store.items).to_dict()


@app.post("/bookmarks", status_code=201)
async def create_bookmark(request: BookmarkCreate, store: BookmarkStore = Depends(get_bookmark_store)):
    bookmark = store.add(request.model_dump(exclude_none=True))
    return bookmark.to_dict()


@app.patch("/bookmarks/{bookmark_id}")
async def update_bookmark(
    bookmark_id: int,
    request: BookmarkUpdate,
    store: BookmarkStore = Depends(get_bookmark_store),
):
    return _bookmark_or_404(store.update, bookmark_id, request.model_dump(exclude_unset=True))


@app.delete("/bookmarks/{bookmark_id}")
async def delete_bookmark(bookmark_id: int, store: BookmarkStore = Depends(get_bookmark_store)):
    try:
        store.delete(bookmark_id)
    except StoreItemNotFoundError:
        raise HTTPException(status_code=404, detail=f"Bookmark not found: {bookmark_id}")
    return {"success": True, "deleted": bookmark_id}


@app.post("/bookmarks/{bookmark_id}/toggle")
async def toggle_bookmark(bookmark_id: int, store: BookmarkStore = Depends(get_bookmark_store)):
    return _bookmark_or_404(store.toggle, bookmark_id)


@app.post("/bookmarks/{bookmark_id}/use")
async def use_bookmark(bookmark_id: int, store: BookmarkStore = Depends(get_bookmark_store)):
    return _bookmark_or_404(store.increment_usage, bookmark_id)


def _bookmark_or_404(operation, bookmark_id: int, *args: Any) -> Dict[str, Any]:
    try:
        return operation(bookmark_id, *args).to_dict()
    except StoreItemNotFoundError:
        raise HTTPException(status_code=404, detail=f"Bookmark not found: {bookmark_id}")


@app.get("/search-history")
async def list_search_history(history: SearchHistory = Depends(get_search_history)):
    return {"terms": history.terms}


@app.post("/search-history")
async def add_search_term(request: SearchTermRequest, history: SearchHistory = Depends(get_search_history)):
    return {"terms": history.add(request.term)}


@app.delete("/search-history")
async def clear_search_history(history: SearchHistory = Depends(get_search_history)):
    history.clear()
    return {"terms": []}


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=8004)
