from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy import delete, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tarot42.core.database import get_db
from tarot42.dependencies.auth import get_current_user_id
from tarot42.models.user_goal import UserGoal
from tarot42.schemas.goal import GoalCreateIn, GoalEnvelopeOut, GoalOut, GoalUpdateIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/goals", tags=["goals"])

# user_goal.id is a 32-bit INTEGER column; larger ids cannot be bound.
MAX_GOAL_ID = 2_147_483_647


def _bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


@router.get("", response_model=list[GoalOut])
def list_goals(db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    try:
        return (
            db.query(UserGoal)
            .filter(UserGoal.user_id == user_id)
            .order_by(UserGoal.created_at, UserGoal.id)
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Error fetching user goals: user_id=%s", user_id)
        raise HTTPException(status_code=500, detail="Failed to fetch goals")


@router.post("", response_model=GoalEnvelopeOut, status_code=status.HTTP_201_CREATED)
def create_goal(
    payload: GoalCreateIn,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    goal_text = (payload.goal_text or "").strip()
    if not goal_text:
        raise _bad_request("Goal text is required and cannot be empty.")

    goal = UserGoal(user_id=user_id, goal_text=goal_text, is_achieved=False)
    try:
        db.add(goal)
        db.commit()
        db.refresh(goal)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error creating user goal: user_id=%s", user_id)
        raise HTTPException(status_code=500, detail="Failed to create goal")

    return {"message": "Goal created successfully", "goal": goal}


@router.put("/{goal_id}", response_model=GoalEnvelopeOut)
def update_goal(
    payload: GoalUpdateIn,
    goal_id: int = Path(..., ge=1, le=MAX_GOAL_ID),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    data = payload.model_dump(exclude_unset=True)
    values: dict = {}

    if "goal_text" in data:
        goal_text = (data["goal_text"] or "").strip()
        if not goal_text:
            raise _bad_request("Goal text cannot be empty.")
        values["goal_text"] = goal_text

    if "is_achieved" in data:
        if data["is_achieved"] is None:
            raise _bad_request("isAchieved must be a boolean.")
        values["is_achieved"] = data["is_achieved"]

    if not values:
        raise _bad_request("No update data provided.")

    values["updated_at"] = datetime.now(timezone.utc)

    try:
        # Scoped by id AND owner: another user's goal id matches zero rows.
        goal = db.scalars(
            update(UserGoal)
            .where(UserGoal.id == goal_id, UserGoal.user_id == user_id)
            .values(**values)
            .returning(UserGoal)
        ).first()
        if goal is None:
            db.rollback()
            raise HTTPException(status_code=404, detail="Goal not found or user not authorized to update.")
        out = GoalOut.model_validate(goal)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error updating user goal: user_id=%s goal_id=%s", user_id, goal_id)
        raise HTTPException(status_code=500, detail="Failed to update goal")

    return {"message": "Goal updated successfully", "goal": out}


@router.delete("/{goal_id}", response_model=GoalEnvelopeOut)
def delete_goal(
    goal_id: int = Path(..., ge=1, le=MAX_GOAL_ID),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        goal = db.scalars(
            delete(UserGoal)
            .where(UserGoal.id == goal_id, UserGoal.user_id == user_id)
            .returning(UserGoal)
        ).first()
        if goal is None:
            db.rollback()
            raise HTTPException(status_code=404, detail="Goal not found or user not authorized to delete.")
        # Serialise before commit; the deleted instance can't be refreshed afterwards.
        out = GoalOut.model_validate(goal)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error deleting user goal: user_id=%s goal_id=%s", user_id, goal_id)
        raise HTTPException(status_code=500, detail="Failed to delete goal")

    return {"message": "Goal deleted successfully", "goal": out}
