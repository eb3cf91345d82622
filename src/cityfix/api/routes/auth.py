"""Registration, login and profile routes."""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter
from jose import jwt

from cityfix.config import settings
from cityfix.db.models.user import UserRow
from cityfix.dependencies import CurrentUser, DBSession
from cityfix.errors.exceptions import AuthenticationError, NotFoundError, ValidationError
from cityfix.models.user import AuthResponse, UserCreate, UserEnvelope, UserLogin, UserResponse, UserUpdate
from cityfix.repositories.user_repo import UserRepository
from cityfix.services.id_generator import USER_PREFIX, generate_id

router = APIRouter(tags=["Auth"])

_PBKDF2_ITERATIONS = 100_000


# ── Token and password helpers ────────────────────────────────────────────────

def make_access_token(user: UserRow) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user.user_id,
        "email": user.email,
        "name": user.name,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_access_token_expire_minutes),
        "type": "access",
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def _hash_password(password: str) -> str:
    salt = secrets.token_hex(16)
    h = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), _PBKDF2_ITERATIONS).hex()
    return f"{salt}:{h}"


def _verify_password(password: str, hashed: str) -> bool:
    parts = hashed.split(":", 1)
    if len(parts) != 2:
        return False
    salt, stored = parts
    h = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), _PBKDF2_ITERATIONS).hex()
    return secrets.compare_digest(h, stored)


def _user_response(user: UserRow) -> UserResponse:
    return UserResponse(
        id=user.user_id,
        name=user.name,
        email=user.email,
        avatar=user.avatar,
        notifications=user.notifications,
        location_services=user.location_services,
        created_at=user.created_at,
    )


# ── Auth endpoints ─────────────────────────────────────────────────────────────

@router.post("/auth/register", response_model=AuthResponse, status_code=201)
async def register(body: UserCreate, db: DBSession):
    repo = UserRepository(db)
    email = body.email.lower()
    if await repo.get_by_email(email):
        raise ValidationError("Email already registered", field="email")

    user = await repo.create(
        user_id=generate_id(USER_PREFIX),
        email=email,
        name=body.name.strip(),
        hashed_password=_hash_password(body.password),
        notifications=True,
        location_services=True,
    )
    await db.commit()
    return AuthResponse(token=make_access_token(user), user=_user_response(user))


@router.post("/auth/login", response_model=AuthResponse)
async def login(body: UserLogin, db: DBSession):
    repo = UserRepository(db)
    user = await repo.get_by_email(body.email)
    if not user or not _verify_password(body.password, user.hashed_password):
        raise AuthenticationError("Invalid email or password")
    return AuthResponse(token=make_access_token(user), user=_user_response(user))


# ── Profile ────────────────────────────────────────────────────────────────────

@router.get("/auth/user", response_model=UserResponse)
async def get_me(current: CurrentUser, db: DBSession):
    user = await UserRepository(db).get(current["sub"])
    if not user:
        raise NotFoundError("User", current["sub"])
    return _user_response(user)


@router.put("/auth/user", response_model=UserEnvelope)
async def update_me(body: UserUpdate, current: CurrentUser, db: DBSession):
    repo = UserRepository(db)
    user = await repo.get(current["sub"])
    if not user:
        raise NotFoundError("User", current["sub"])

    changes = body.model_dump(exclude_none=True)
    if "email" in changes:
        changes["email"] = changes["email"].lower()
        other = await repo.get_by_email(changes["email"])
        if other and other.user_id != user.user_id:
            raise ValidationError("Email already registered", field="email")
    if "name" in changes:
        changes["name"] = changes["name"].strip()

    await repo.update(user, **changes)
    await db.commit()
    return UserEnvelope(user=_user_response(user))
