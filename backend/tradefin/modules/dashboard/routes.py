from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tradefin.core.db.session import get_db
from tradefin.core.security.auth import Actor
from tradefin.core.security.dependencies import get_actor, require_staff
from tradefin.modules.dashboard import service
from tradefin.modules.dashboard.schemas import CustomerDashboardOut, StaffDashboardOut

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=StaffDashboardOut)
def staff_dashboard(db: Session = Depends(get_db), actor: Actor = Depends(require_staff)) -> StaffDashboardOut:
    return service.staff_dashboard(db, actor=actor)


@router.get("/me", response_model=CustomerDashboardOut)
def my_dashboard(db: Session = Depends(get_db), actor: Actor = Depends(get_actor)) -> CustomerDashboardOut:
    return service.customer_dashboard(db, actor=actor)
