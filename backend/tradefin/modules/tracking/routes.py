from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tradefin.core.db.session import get_db
from tradefin.core.security.auth import Actor
from tradefin.core.security.dependencies import get_actor
from tradefin.modules.tracking import service
from tradefin.modules.tracking.schemas import TrackingOut

router = APIRouter(prefix="/track", tags=["tracking"])


@router.get("/{reference}", response_model=TrackingOut)
def track(reference: str, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)) -> TrackingOut:
    return service.track(db, reference=reference, actor=actor)
