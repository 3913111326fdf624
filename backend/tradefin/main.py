from __future__ import annotations

import json

from fastapi import Depends, FastAPI, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from tradefin.core.config import settings
from tradefin.core.db.models import User
from tradefin.core.db.session import get_db
from tradefin.core.http.errors import register_exception_handlers
from tradefin.core.logging import configure_logging
from tradefin.core.middleware.request_id import RequestIdMiddleware
from tradefin.modules.compliance.routes import router as compliance_router
from tradefin.modules.dashboard.routes import router as dashboard_router
from tradefin.modules.documents.routes import router as documents_router
from tradefin.modules.guarantees.routes import router as guarantees_router
from tradefin.modules.letters_of_credit.routes import router as lc_router
from tradefin.modules.risk.routes import router as risk_router
from tradefin.modules.tracking.routes import router as tracking_router
from tradefin.shared.enums import Env, Role
from tradefin.shared.utils import utcnow

ROUTERS = [
    lc_router,
    guarantees_router,
    documents_router,
    risk_router,
    compliance_router,
    tracking_router,
    dashboard_router,
]


class DevSeedRequest(BaseModel):
    username: str = Field(default="officer", min_length=1, max_length=100)
    full_name: str | None = Field(default="Dev Officer", max_length=200)
    email: str | None = Field(default="officer@local", max_length=320)
    role: Role = Role.OFFICER


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="Trade Finance Lifecycle - Backend", version="0.1.0")
    app.add_middleware(RequestIdMiddleware)
    register_exception_handlers(app)

    @app.get("/health", tags=["admin"])
    @app.get("/api/health", include_in_schema=False)
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/admin/dev/seed", tags=["admin"])
    def dev_seed(payload: DevSeedRequest, db: Session = Depends(get_db)) -> dict:
        if settings.env != Env.dev:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)

        user = db.execute(select(User).where(User.username == payload.username)).scalar_one_or_none()
        if user is None:
            now = utcnow()
            user = User(
                username=payload.username,
                full_name=payload.full_name,
                email=payload.email,
                role=payload.role.value,
                is_active=True,
                created_at=now,
                updated_at=now,
                created_by="dev-seed",
                updated_by="dev-seed",
            )
            db.add(user)
            db.commit()

        return {
            "user_id": user.id,
            "dev_actor_header_name": settings.dev_actor_header,
            "dev_actor_header_value": json.dumps(
                {
                    "username": user.username,
                    "role": user.role,
                    "full_name": user.full_name,
                    "email": user.email,
                }
            ),
        }

    for router in ROUTERS:
        app.include_router(router)

    # Static Web Apps proxies the backend under /api/*.
    for router in ROUTERS:
        app.include_router(router, prefix="/api")

    return app


app = create_app()
