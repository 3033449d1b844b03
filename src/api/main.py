"""
FastAPI backend: REST API for users and circles.
Run with uvicorn: uvicorn api.main:app --reload
"""

import logging
import os
import threading
from pathlib import Path

from dotenv import load_dotenv

# Load .env from repo root (when run from repo root or from Docker)
for path in (
    Path(__file__).resolve().parent.parent.parent / ".env",
    Path.cwd() / ".env",
):
    if path.exists():
        load_dotenv(path)
        break

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from neo4j import GraphDatabase
from pydantic import BaseModel

from circles.application import (
    CircleCreated,
    CircleDeleted,
    CircleDetails,
    CircleFull,
    CircleRenamed,
    CircleService,
    CircleSummary,
    Duplicate,
    Invalid,
    MemberAdded,
    MemberRemoved,
    NotFound,
    OwnerCannotBeMember,
    UserCreated,
    UserDeleted,
    UserDetails,
    UserService,
)
from circles.domain import CapacityLimits, ErrorKind, RecommendationRules
from circles.infrastructure import (
    InMemoryCircleRepository,
    InMemoryUserRepository,
    Neo4jCircleRepository,
    Neo4jUserRepository,
    ensure_constraints,
)

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)

STORAGE_MEMORY = "memory"
STORAGE_NEO4J = "neo4j"

_services_lock = threading.Lock()

_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.RULE_VIOLATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.CAPACITY: 409,
}


def _storage() -> str:
    return os.environ.get("CIRCLES_STORAGE", STORAGE_MEMORY).strip().lower()


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return default


def _capacity_limits() -> CapacityLimits:
    defaults = CapacityLimits()
    return CapacityLimits(
        basic_limit=_env_int("CIRCLE_BASIC_LIMIT", defaults.basic_limit),
        premium_limit=_env_int("CIRCLE_PREMIUM_LIMIT", defaults.premium_limit),
        premium_threshold=_env_int(
            "CIRCLE_PREMIUM_THRESHOLD", defaults.premium_threshold
        ),
    )


def _recommendation_rules() -> RecommendationRules:
    return RecommendationRules(
        min_participants=_env_int(
            "CIRCLE_RECOMMEND_MIN_PARTICIPANTS",
            RecommendationRules().min_participants,
        )
    )


def _get_driver():
    uri = os.environ.get("NEO4J_URI", "bolt://localhost:7687").strip()
    user = os.environ.get("NEO4J_USER", "neo4j").strip()
    password = os.environ.get("NEO4J_PASSWORD", "password").strip()
    return GraphDatabase.driver(uri, auth=(user, password))


def _get_cached_driver(app: FastAPI):
    if getattr(app.state, "driver", None) is None:
        app.state.driver = _get_driver()
    return app.state.driver


def get_services(app: FastAPI) -> tuple[CircleService, UserService]:
    """Build the services once per app, backed by the configured storage."""
    services = getattr(app.state, "services", None)
    if services is not None:
        return services
    with _services_lock:
        # Sync routes run in a threadpool; concurrent first requests share one build.
        services = getattr(app.state, "services", None)
        if services is None:
            services = _build_services(app)
            app.state.services = services
    return services


def _build_services(app: FastAPI) -> tuple[CircleService, UserService]:
    if _storage() == STORAGE_NEO4J:
        driver = _get_cached_driver(app)
        circles = Neo4jCircleRepository(driver)
        users = Neo4jUserRepository(driver)
    else:
        circles = InMemoryCircleRepository()
        users = InMemoryUserRepository()
    services = (
        CircleService(
            circles,
            users,
            limits=_capacity_limits(),
            rules=_recommendation_rules(),
        ),
        UserService(users),
    )
    return services


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.driver = None
    app.state.services = None
    storage = _storage()
    logger.info("Circles API starting with %s storage", storage)
    try:
        if storage == STORAGE_NEO4J:
            ensure_constraints(_get_cached_driver(app))
        yield
    finally:
        if getattr(app.state, "driver", None) is not None:
            app.state.driver.close()


app = FastAPI(title="Circles API", lifespan=lifespan)


def _failure(
    result: Invalid | NotFound | Duplicate | CircleFull | OwnerCannotBeMember,
) -> JSONResponse:
    if isinstance(result, Invalid):
        detail = result.reason
    elif isinstance(result, NotFound):
        detail = f"{result.entity} not found"
    elif isinstance(result, Duplicate):
        detail = f"{result.entity} name already exists"
    elif isinstance(result, CircleFull):
        detail = (
            f"circle is full: maximum {result.max_participants} participants "
            "(including owner) allowed"
        )
    else:
        detail = "owner cannot be a member"
    return JSONResponse(
        content={"detail": detail, "kind": result.kind.value},
        status_code=_STATUS_BY_KIND[result.kind],
    )


# --- REST: health ---


@app.get("/health")
def health():
    return {"status": "ok"}


# --- REST: users ---


class CreateUserBody(BaseModel):
    first_name: str
    last_name: str
    email: str
    is_premium: bool = False


class UpdateUserBody(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    is_premium: bool | None = None


class UserItem(BaseModel):
    user_id: str
    first_name: str
    last_name: str
    email: str
    is_premium: bool


def _user_item(details: UserDetails) -> UserItem:
    return UserItem(
        user_id=details.user_id,
        first_name=details.first_name,
        last_name=details.last_name,
        email=details.email,
        is_premium=details.is_premium,
    )


@app.post("/users")
def create_user(body: CreateUserBody, request: Request):
    _, users = get_services(request.app)
    result = users.create_user(
        body.first_name, body.last_name, body.email, is_premium=body.is_premium
    )
    if not isinstance(result, UserCreated):
        return _failure(result)
    return JSONResponse(content={"user_id": result.user_id}, status_code=201)


@app.get("/users/{user_id}")
def get_user(user_id: str, request: Request):
    _, users = get_services(request.app)
    result = users.get_user(user_id)
    if not isinstance(result, UserDetails):
        return _failure(result)
    return _user_item(result)


@app.put("/users/{user_id}")
def update_user(user_id: str, body: UpdateUserBody, request: Request):
    _, users = get_services(request.app)
    result = users.update_user(
        user_id,
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        is_premium=body.is_premium,
    )
    if not isinstance(result, UserDetails):
        return _failure(result)
    return _user_item(result)


@app.delete("/users/{user_id}")
def delete_user(user_id: str, request: Request):
    _, users = get_services(request.app)
    result = users.delete_user(user_id)
    if not isinstance(result, UserDeleted):
        return _failure(result)
    return Response(status_code=204)


# --- REST: circles ---


class CreateCircleBody(BaseModel):
    name: str
    owner_id: str


class RenameCircleBody(BaseModel):
    name: str


class AddMemberBody(BaseModel):
    user_id: str


class CircleListItem(BaseModel):
    circle_id: str
    name: str
    owner_id: str
    member_count: int
    total_participants: int
    created_at: str


class CircleItem(BaseModel):
    circle_id: str
    name: str
    owner_id: str
    member_ids: list[str]
    total_participants: int
    max_participants: int
    available_slots: int
    created_at: str


def _circle_list_item(s: CircleSummary) -> CircleListItem:
    return CircleListItem(
        circle_id=s.circle_id,
        name=s.name,
        owner_id=s.owner_id,
        member_count=s.member_count,
        total_participants=s.total_participants,
        created_at=s.created_at.isoformat(),
    )


@app.post("/circles")
def create_circle(body: CreateCircleBody, request: Request):
    circles, _ = get_services(request.app)
    result = circles.create_circle(body.name, body.owner_id)
    if not isinstance(result, CircleCreated):
        return _failure(result)
    return JSONResponse(
        content={"circle_id": result.circle_id, "name": result.name},
        status_code=201,
    )


@app.get("/circles")
def list_circles(request: Request):
    circles, _ = get_services(request.app)
    return [_circle_list_item(s) for s in circles.list_circles()]


@app.get("/circles/recommended")
def list_recommended_circles(request: Request):
    circles, _ = get_services(request.app)
    return [_circle_list_item(s) for s in circles.list_recommended_circles()]


@app.get("/circles/{circle_id}")
def get_circle(circle_id: str, request: Request):
    circles, _ = get_services(request.app)
    result = circles.get_circle(circle_id)
    if not isinstance(result, CircleDetails):
        return _failure(result)
    return CircleItem(
        circle_id=result.circle_id,
        name=result.name,
        owner_id=result.owner_id,
        member_ids=list(result.member_ids),
        total_participants=result.total_participants,
        max_participants=result.max_participants,
        available_slots=result.available_slots,
        created_at=result.created_at.isoformat(),
    )


@app.patch("/circles/{circle_id}")
def rename_circle(circle_id: str, body: RenameCircleBody, request: Request):
    circles, _ = get_services(request.app)
    result = circles.rename_circle(circle_id, body.name)
    if not isinstance(result, CircleRenamed):
        return _failure(result)
    return {"circle_id": result.circle_id, "name": result.name}


@app.delete("/circles/{circle_id}")
def delete_circle(circle_id: str, request: Request):
    circles, _ = get_services(request.app)
    result = circles.delete_circle(circle_id)
    if not isinstance(result, CircleDeleted):
        return _failure(result)
    return Response(status_code=204)


@app.post("/circles/{circle_id}/members")
def add_member(circle_id: str, body: AddMemberBody, request: Request):
    circles, _ = get_services(request.app)
    result = circles.add_member(circle_id, body.user_id)
    if not isinstance(result, MemberAdded):
        return _failure(result)
    return JSONResponse(
        content={
            "circle_id": result.circle_id,
            "user_id": result.user_id,
            "available_slots": result.available_slots,
            "already_member": result.already_member,
        },
        status_code=200 if result.already_member else 201,
    )


@app.delete("/circles/{circle_id}/members/{user_id}")
def remove_member(circle_id: str, user_id: str, request: Request):
    circles, _ = get_services(request.app)
    result = circles.remove_member(circle_id, user_id)
    if not isinstance(result, MemberRemoved):
        return _failure(result)
    return {
        "circle_id": result.circle_id,
        "user_id": result.user_id,
        "was_member": result.was_member,
    }
