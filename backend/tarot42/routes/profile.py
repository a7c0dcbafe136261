from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tarot42.core.database import get_db
from tarot42.dependencies.auth import get_current_user_id
from tarot42.models.user import User
from tarot42.schemas.profile import CompletenessOut, ProfileOut, ProfileUpdateIn, ProfileUpdateOut
from tarot42.services.profile import COMPLETENESS_FIELDS, InvalidProfileUpdate, build_profile_update, compute_completeness

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile", tags=["profile"])


def _user_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")


@router.get("", response_model=ProfileOut)
def get_profile(db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    try:
        user = db.query(User).filter(User.id == user_id).first()
    except SQLAlchemyError:
        logger.exception("Error fetching user profile: user_id=%s", user_id)
        raise HTTPException(status_code=500, detail="Failed to fetch profile")

    if not user:
        raise _user_not_found()
    return user


@router.put("", response_model=ProfileUpdateOut)
def update_profile(
    payload: ProfileUpdateIn,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        data = build_profile_update(payload)
    except InvalidProfileUpdate as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    data["updated_at"] = datetime.now(timezone.utc)
    logger.info("Updating user profile: user_id=%s fields=%s", user_id, sorted(data))

    try:
        user = db.scalars(
            update(User).where(User.id == user_id).values(**data).returning(User)
        ).first()
        if user is None:
            db.rollback()
            raise _user_not_found()
        out = ProfileOut.model_validate(user)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error updating user profile: user_id=%s", user_id)
        raise HTTPException(status_code=500, detail="Failed to update profile")

    return {"message": "Profile updated successfully", "user": out}


@router.get("/completeness", response_model=CompletenessOut)
def get_profile_completeness(db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    columns = [getattr(User, field) for field in COMPLETENESS_FIELDS]
    try:
        row = db.execute(select(*columns).where(User.id == user_id).limit(1)).first()
    except SQLAlchemyError:
        logger.exception("Error calculating profile completeness: user_id=%s", user_id)
        raise HTTPException(status_code=500, detail="Failed to calculate completeness")

    if row is None:
        raise _user_not_found()
    return compute_completeness(dict(row._mapping))
