# app/api/deps.py
from dataclasses import dataclass, field
from functools import lru_cache
from typing import FrozenSet

from fastapi import Depends, Header, HTTPException

from app.services.notification_service import NotificationService
from app.services.rate_limiter import RateLimiter
from app.utils.settings import CHECKOUT_RATE_LIMIT, CHECKOUT_RATE_WINDOW_SECONDS


@dataclass(frozen=True)
class Requester:
    """Uzytkownik uwierzytelniony przez gateway (naglowki X-User-*)."""

    user_id: int
    roles: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return "admin" in self.roles

    def has_any_role(self, *roles: str) -> bool:
        return bool(self.roles.intersection(roles))


def get_requester(
    x_user_id: int = Header(..., gt=0),
    x_user_roles: str = Header(""),
) -> Requester:
    roles = frozenset(r.strip().lower() for r in x_user_roles.split(",") if r.strip())
    return Requester(user_id=x_user_id, roles=roles)


def require_roles(*roles: str):
    def checker(requester: Requester = Depends(get_requester)) -> Requester:
        if not requester.has_any_role(*roles):
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return requester

    return checker


@lru_cache
def get_rate_limiter() -> RateLimiter:
    return RateLimiter()


def get_notifications() -> NotificationService:
    return NotificationService()


def checkout_rate_limit(
    requester: Requester = Depends(get_requester),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> None:
    if not limiter.allow("checkout", requester.user_id, CHECKOUT_RATE_LIMIT, CHECKOUT_RATE_WINDOW_SECONDS):
        raise HTTPException(status_code=429, detail="Too many checkout attempts, try again later")
