from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tarot42.core.database import get_db
from tarot42.dependencies.auth import get_current_user_id
from tarot42.models.drawn_card import DrawnCard
from tarot42.schemas.drawn_card import DrawnCardCreateIn, DrawnCardOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cards", tags=["cards"])


@router.get("/history", response_model=list[DrawnCardOut])
def list_drawn_cards(
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        return (
            db.query(DrawnCard)
            .filter(DrawnCard.user_id == user_id)
            .order_by(desc(DrawnCard.drawn_at), desc(DrawnCard.id))
            .limit(limit)
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Error fetching drawn cards: user_id=%s", user_id)
        raise HTTPException(status_code=500, detail="Failed to fetch card history")


@router.post("/history", response_model=DrawnCardOut, status_code=status.HTTP_201_CREATED)
def record_drawn_card(
    payload: DrawnCardCreateIn,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    card_name = (payload.card_name or "").strip()
    if not card_name:
        raise HTTPException(status_code=400, detail="Card name is required and cannot be empty.")

    context = (payload.reading_context or "").strip() or None
    card = DrawnCard(
        user_id=user_id,
        card_name=card_name,
        card_upright=payload.card_upright,
        reading_context=context,
    )
    try:
        db.add(card)
        db.commit()
        db.refresh(card)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error recording drawn card: user_id=%s", user_id)
        raise HTTPException(status_code=500, detail="Failed to record card")

    return card
