"""
Users router - the signed-in user's own profile.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lacr.db.session import get_db
from lacr.deps import get_current_user
from lacr.models.user import User
from lacr.schemas.user import ProfileResponse, ProfileUpdate, UserOut
from lacr.services.accounts import account_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/profile", response_model=ProfileResponse)
def get_profile(current_user: User = Depends(get_current_user)):
    return ProfileResponse(user=UserOut.model_validate(current_user))


@router.put("/profile", response_model=ProfileResponse)
def update_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Update name, photo or the active robot model.

    active_model must be one of the models the user actually owns.
    """
    user = account_service.update_profile(
        db,
        current_user,
        name=payload.name,
        photo_url=payload.photo_url,
        active_model=payload.active_model,
    )
    return ProfileResponse(user=UserOut.model_validate(user))
