"""
peerlib API Server

FastAPI boundary over the in-memory peer library. Exposes accounts,
reputation, the resource catalogue and search as JSON endpoints.

Endpoints:
- POST /api/v1/accounts - Register an account
- GET /api/v1/accounts - List accounts
- GET /api/v1/accounts/{account_id} - Get an account
- GET /api/v1/accounts/{account_id}/reputation - Reputation details
- GET /api/v1/accounts/{account_id}/access - Reputation gate for an action
- GET /api/v1/accounts/{account_id}/library - Resources owned by an account
- GET /api/v1/leaderboard - Top accounts by score
- POST /api/v1/resources - Share a resource (metadata only)
- GET /api/v1/resources/popular|recent|top-rated - Catalogue views
- GET /api/v1/resources/{resource_id} - Get a resource
- POST /api/v1/resources/{resource_id}/download - Record a download
- POST /api/v1/resources/{resource_id}/rate - Rate a resource
- POST /api/v1/resources/{resource_id}/tags - Add tags
- GET /api/v1/search - Ranked, filtered, paginated search
- GET /api/v1/search/suggestions - Title/subject suggestions
- GET /api/v1/search/subject/{subject} - Resources in a subject
- GET /api/v1/search/tag/{tag} - Resources carrying a tag
- POST /api/v1/reputation/recalculate - Recalculate every account
- GET /api/v1/network/stats - Network reputation statistics
- GET /api/v1/library/stats - Catalogue statistics
- GET /api/v1/library/categories - Subject categories and allowed file types
"""

import os
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, Header, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from loguru import logger

from peerlib.backends.memory import MemoryStore
from peerlib.core.exceptions import (
    AlreadyExistsError,
    InsufficientReputationError,
    LibraryError,
    ValidationError,
    is_not_found,
)
from peerlib.core.models import ALLOWED_FILE_TYPES, SUBJECT_CATEGORIES, Resource
from peerlib.reputation.service import DEFAULT_ACTION, ReputationService
from peerlib.search.engine import DEFAULT_PAGE_SIZE, SearchFilters, SearchService
from peerlib.seed import seed_demo_data
from peerlib.services.accounts import AccountService
from peerlib.services.library import LibraryService


# =============================================================================
# Configuration
# =============================================================================

class ServerConfig(BaseModel):
    """API server configuration."""

    host: str = Field(
        default="127.0.0.1",
        description="Server host (use 0.0.0.0 for Docker/cloud, set via PEERLIB_API_HOST env var)"
    )
    port: int = Field(default=8080, description="Server port")
    reload: bool = Field(default=False, description="Auto-reload on code changes")

    seed_demo_data: bool = Field(default=True, description="Populate demo accounts and resources")
    default_page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, description="Search page size")
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins"
    )

    @classmethod
    def from_env(cls) -> "ServerConfig":
        return cls(
            host=os.getenv("PEERLIB_API_HOST", "127.0.0.1"),
            port=int(os.getenv("PEERLIB_API_PORT", "8080")),
            reload=os.getenv("RELOAD", "false").lower() == "true",
            seed_demo_data=os.getenv("SEED_DEMO_DATA", "true").lower() == "true",
            default_page_size=int(os.getenv("DEFAULT_PAGE_SIZE", str(DEFAULT_PAGE_SIZE))),
        )


# =============================================================================
# API Models
# =============================================================================

class CreateAccountRequest(BaseModel):
    username: str
    email: str


class CreateResourceRequest(BaseModel):
    """Metadata for a shared resource (no file content is transferred)."""

    filename: str
    size: int = Field(..., description="File size in bytes")
    title: str = ""
    description: str = ""
    subject: str = ""
    tags: List[str] = Field(default_factory=list)


class RateResourceRequest(BaseModel):
    rating: float = Field(..., description="Rating from 1 to 5")


class TagsRequest(BaseModel):
    tags: List[str]


class ReputationResponse(BaseModel):
    account_id: str
    score: int
    tier: str
    uploads: int
    downloads: int
    average_rating: float
    throttle: float


class NetworkStatsResponse(BaseModel):
    total_users: int
    contributors: int
    neutral: int
    leechers: int
    average_score: float


class RecalculationResponse(BaseModel):
    updated: int
    skipped: List[str]


class LibraryStatsResponse(BaseModel):
    total_resources: int
    total_downloads: int
    total_ratings: int
    by_subject: Dict[str, int]
    by_type: Dict[str, int]


# =============================================================================
# Global State
# =============================================================================

class AppState:
    """Application state."""

    def __init__(self):
        self.config: Optional[ServerConfig] = None
        self.store: Optional[MemoryStore] = None
        self.accounts: Optional[AccountService] = None
        self.library: Optional[LibraryService] = None
        self.reputation: Optional[ReputationService] = None
        self.search: Optional[SearchService] = None

    def initialize(self, config: ServerConfig):
        """Build a fresh store and wire the services to it."""
        self.config = config
        self.store = MemoryStore()
        self.accounts = AccountService(self.store)
        self.library = LibraryService(self.store, self.accounts)
        self.reputation = ReputationService(self.store)
        self.search = SearchService(self.store)

        if config.seed_demo_data:
            seed_demo_data(self.accounts, self.library, self.reputation)

        accounts, resources = self.store.count()
        logger.info("✅ Library initialized")
        logger.info("   Accounts: {}", accounts)
        logger.info("   Resources: {}", resources)
        logger.info("   Demo data: {}", "seeded" if config.seed_demo_data else "disabled")

    def shutdown(self):
        logger.info("✅ peerlib API server shutdown complete")


# Global app state
app_state = AppState()


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan."""
    app_state.initialize(ServerConfig.from_env())

    yield

    app_state.shutdown()


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="peerlib API",
    description="In-memory P2P academic library with reputation-based throttling",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ServerConfig().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LibraryError)
async def library_error_handler(request: Request, exc: LibraryError):
    """Map domain errors onto HTTP status codes."""
    if is_not_found(exc):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, ValidationError):
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, AlreadyExistsError):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(exc, InsufficientReputationError):
        status_code = status.HTTP_403_FORBIDDEN
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        logger.error("{} {} failed: {}", request.method, request.url.path, exc)

    return JSONResponse(status_code=status_code, content=exc.to_dict())


# =============================================================================
# Health
# =============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "peerlib-api",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "store_initialized": app_state.store is not None,
    }


# =============================================================================
# Accounts & Reputation
# =============================================================================

@app.post("/api/v1/accounts", status_code=status.HTTP_201_CREATED)
async def create_account(request: CreateAccountRequest) -> Dict[str, Any]:
    account = app_state.accounts.create_account(request.username, request.email)
    logger.info("👤 Registered account: {}", account.username)
    return account.to_dict()


@app.get("/api/v1/accounts")
async def list_accounts() -> List[Dict[str, Any]]:
    return [a.to_dict() for a in app_state.accounts.list_accounts()]


@app.get("/api/v1/accounts/{account_id}")
async def get_account(account_id: str) -> Dict[str, Any]:
    return app_state.accounts.get_account(account_id).to_dict()


@app.get("/api/v1/accounts/{account_id}/reputation", response_model=ReputationResponse)
async def get_reputation(account_id: str):
    info = app_state.reputation.get_reputation_info(account_id)
    return ReputationResponse(**{**asdict(info), "tier": info.tier.value})


@app.get("/api/v1/accounts/{account_id}/access")
async def check_access(
    account_id: str,
    required_score: int = 0,
    action: str = DEFAULT_ACTION,
) -> Dict[str, Any]:
    """Gate an action on a minimum score; 403 when the account falls short."""
    app_state.reputation.check_access_allowed(account_id, required_score, action)
    return {"account_id": account_id, "action": action, "allowed": True}


@app.get("/api/v1/accounts/{account_id}/library")
async def get_account_library(account_id: str) -> List[Dict[str, Any]]:
    app_state.accounts.get_account(account_id)
    return [r.to_dict() for r in app_state.library.get_owner_library(account_id)]


@app.get("/api/v1/leaderboard")
async def get_leaderboard(limit: int = 10) -> List[Dict[str, Any]]:
    return [a.to_dict() for a in app_state.reputation.leaderboard(limit)]


@app.post("/api/v1/reputation/recalculate", response_model=RecalculationResponse)
async def recalculate_reputation():
    report = app_state.reputation.recalculate_all()
    return RecalculationResponse(updated=len(report.updated), skipped=report.skipped)


@app.get("/api/v1/network/stats", response_model=NetworkStatsResponse)
async def get_network_stats():
    return NetworkStatsResponse(**asdict(app_state.reputation.network_stats()))


# =============================================================================
# Resources
# =============================================================================

@app.post("/api/v1/resources", status_code=status.HTTP_201_CREATED)
async def create_resource(
    request: CreateResourceRequest,
    x_account_id: Optional[str] = Header(default=None),
) -> Dict[str, Any]:
    """Share a resource on behalf of the account in the X-Account-ID header."""
    if not x_account_id:
        raise ValidationError("X-Account-ID", "account id header is required")

    app_state.accounts.get_account(x_account_id)
    resource = Resource.create(
        request.filename,
        request.size,
        x_account_id,
        title=request.title,
        description=request.description,
        subject=request.subject,
        tags=request.tags,
    )
    app_state.library.upload(resource)

    logger.info("📤 Shared resource: {} ({})", resource.filename, resource.resource_id)
    return resource.to_dict()


@app.get("/api/v1/resources/popular")
async def get_popular(limit: int = 10) -> List[Dict[str, Any]]:
    return [r.to_dict() for r in app_state.library.popular(limit)]


@app.get("/api/v1/resources/recent")
async def get_recent(limit: int = 10) -> List[Dict[str, Any]]:
    return [r.to_dict() for r in app_state.library.recent(limit)]


@app.get("/api/v1/resources/top-rated")
async def get_top_rated(limit: int = 10) -> List[Dict[str, Any]]:
    return [r.to_dict() for r in app_state.library.top_rated(limit)]


@app.get("/api/v1/resources/{resource_id}")
async def get_resource(resource_id: str) -> Dict[str, Any]:
    return app_state.library.get_resource(resource_id).to_dict()


@app.post("/api/v1/resources/{resource_id}/download")
async def download_resource(
    resource_id: str,
    x_account_id: Optional[str] = Header(default=None),
) -> Dict[str, Any]:
    """Record a download; the response carries the downloader's throttle."""
    resource = app_state.library.download(resource_id, x_account_id)

    throttle = None
    if x_account_id:
        throttle = app_state.reputation.get_throttle_speed(x_account_id)

    logger.info("📥 Download of {} by {}", resource.resource_id, x_account_id or "anonymous")
    return {"resource": resource.to_dict(), "throttle": throttle}


@app.post("/api/v1/resources/{resource_id}/rate")
async def rate_resource(resource_id: str, request: RateResourceRequest) -> Dict[str, Any]:
    resource = app_state.library.rate_resource(resource_id, request.rating)
    return {
        "resource_id": resource.resource_id,
        "new_rating": resource.average_rating,
        "total_ratings": resource.total_ratings,
    }


@app.post("/api/v1/resources/{resource_id}/tags")
async def add_tags(resource_id: str, request: TagsRequest) -> Dict[str, Any]:
    return app_state.library.add_tags(resource_id, request.tags).to_dict()


@app.get("/api/v1/library/stats", response_model=LibraryStatsResponse)
async def get_library_stats():
    return LibraryStatsResponse(**asdict(app_state.library.statistics()))


@app.get("/api/v1/library/categories")
async def get_categories() -> Dict[str, List[str]]:
    return {"subjects": SUBJECT_CATEGORIES, "file_types": ALLOWED_FILE_TYPES}


# =============================================================================
# Search
# =============================================================================

def _parse_number(value: Optional[str], cast, default):
    """Parse an optional query value; empty or malformed input means the default."""
    if not value:
        return default
    try:
        return cast(value)
    except ValueError:
        return default


@app.get("/api/v1/search")
async def search_resources(
    q: str = "",
    subject: Optional[str] = None,
    type: Optional[str] = None,
    min_rating: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    page: Optional[str] = None,
    page_size: Optional[str] = None,
) -> Dict[str, Any]:
    """Empty or unparseable filter values are treated as absent."""
    filters = SearchFilters(
        subject=subject or None,
        resource_type=type or None,
        min_rating=_parse_number(min_rating, float, 0.0),
        sort_by=sort_by or None,
        sort_order=sort_order or None,
        page=_parse_number(page, int, 1),
        page_size=_parse_number(page_size, int, 0) or app_state.config.default_page_size,
    )
    return app_state.search.search(q, filters).to_dict()


@app.get("/api/v1/search/suggestions")
async def get_suggestions(q: str = "") -> List[str]:
    return app_state.search.get_suggestions(q)


@app.get("/api/v1/search/subject/{subject}")
async def search_by_subject(subject: str) -> List[Dict[str, Any]]:
    return [r.to_dict() for r in app_state.search.search_by_subject(subject)]


@app.get("/api/v1/search/tag/{tag}")
async def search_by_tag(tag: str) -> List[Dict[str, Any]]:
    return [r.to_dict() for r in app_state.search.search_by_tag(tag)]


# =============================================================================
# Main Entry Point
# =============================================================================

def main():
    """Run API server."""
    logger.add(
        "logs/peerlib_api_{time}.log",
        rotation="1 day",
        retention="30 days",
        level="INFO"
    )

    config = ServerConfig.from_env()

    logger.info("🚀 Starting peerlib API server on {}:{}", config.host, config.port)
    logger.info("   Demo data: {}", config.seed_demo_data)
    logger.info("   Reload: {}", config.reload)

    uvicorn.run(
        "peerlib.api_server:app",
        host=config.host,
        port=config.port,
        reload=config.reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
