from __future__ import annotations

from collections.abc import Callable, Iterable

from fastapi import Depends, HTTPException, Request, status

from tradefin.core.middleware.context import get_logger, set_actor
from tradefin.core.security.auth import Actor, actor_from_request
from tradefin.shared.enums import Role


log = get_logger(__name__)


def get_actor(request: Request) -> Actor:
    try:
        actor = actor_from_request(request)
    except (NotImplementedError, PermissionError, ValueError, KeyError) as exc:
        log.info("auth.rejected", reason=type(exc).__name__)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    set_actor(actor.username, actor.role.value)
    return actor


def require_roles(required: Iterable[Role]) -> Callable[[Actor], Actor]:
    required_set = set(required)

    def _dep(actor: Actor = Depends(get_actor)) -> Actor:
        if actor.role not in required_set:
            log.warning("auth.insufficient_role", username=actor.username, role=actor.role.value)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
        return actor

    return _dep


require_officer = require_roles([Role.OFFICER])
require_staff = require_roles([Role.OFFICER, Role.RISK])
