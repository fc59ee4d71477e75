"""
api/routes/users.py -- User directory endpoints.

Routes:
  GET /api/users?role=  -- list users, newest first (admin only)
  GET /api/users/{id}   -- one user (admin only)
  PUT /api/users/{id}   -- update profile fields (self or admin)

require_admin short-circuits non-admins before the handler runs.
DirectoryService applies the same auth/policy.py rules to every call,
including the self-or-admin check on PUT.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from api.models import MessageResponse, UserDetailResponse, UserListResponse, UserOut, UserUpdate
from auth.dependencies import get_principal, require_admin
from auth.directory import DirectoryService
from auth.models import Principal

# Auth policy:
# - GET /api/users:      requires admin (require_admin)
# - GET /api/users/{id}: requires admin (require_admin)
# - PUT /api/users/{id}: requires auth (get_principal) + self-or-admin check in DirectoryService
router = APIRouter()


def _directory(request: Request) -> DirectoryService:
    return DirectoryService(request.app.state.user_store)


@router.get("/users", response_model=UserListResponse)
def list_users(
    request: Request,
    role: Optional[str] = Query(default=None, max_length=20),
    principal: Principal = Depends(require_admin),
) -> UserListResponse:
    """List user accounts ordered by creation time, newest first. Admin only."""
    users = _directory(request).list_users(principal, role=role or None)
    return UserListResponse(data=[UserOut.from_user(u) for u in users], total=len(users))


@router.get("/users/{user_id}", response_model=UserDetailResponse)
def get_user(request: Request, user_id: int, principal: Principal = Depends(require_admin)) -> UserDetailResponse:
    """Return a single user account. Admin only."""
    return UserDetailResponse(data=UserOut.from_user(_directory(request).get_user(principal, user_id)))


@router.put("/users/{user_id}", response_model=MessageResponse)
def update_user(
    request: Request,
    user_id: int,
    body: UserUpdate,
    principal: Principal = Depends(get_principal),
) -> MessageResponse:
    """Update fullName / email / phone / password.

    Admins may update any account; everyone else only their own. A body with
    nothing to change is rejected with no_changes (400).
    """
    _directory(request).update_user(principal, user_id, body.model_dump(exclude_none=True))
    return MessageResponse(message="User updated successfully.")
