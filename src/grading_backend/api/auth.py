"""
Request authentication: session token to principal.

The token is read from the session header (``Session`` by default) or from
``Authorization: Bearer``. The principal is loaded from storage on every
request.
"""

from typing import Annotated, Optional, Tuple
from fastapi import Depends, Request
from fastapi.security.utils import get_authorization_scheme_param
from sqlalchemy.orm import Session

from grading_backend.database import get_db
from grading_backend.errors import SessionExpiredError
from grading_backend.model.auth import Session as SessionModel
from grading_backend.permissions.principal import Principal
from grading_backend.permissions.sessions import SessionManager
from grading_backend.settings import settings


_session_manager = SessionManager()


def get_session_manager() -> SessionManager:
    return _session_manager


def get_session_token(request: Request) -> Optional[str]:

    token = request.headers.get(settings.SESSION_HEADER)
    if token:
        return token.strip()

    scheme, param = get_authorization_scheme_param(request.headers.get("Authorization"))
    if scheme.lower() == "bearer" and param:
        return param

    return None


def get_current_session(
    request: Request,
    db: Session = Depends(get_db),
    manager: SessionManager = Depends(get_session_manager),
) -> Tuple[SessionModel, Principal]:

    try:
        return manager.resolve(db, get_session_token(request))
    except SessionExpiredError:
        # keep the eager invalidation of the expired session
        db.commit()
        raise


def get_current_principal(
    current: Annotated[Tuple[SessionModel, Principal], Depends(get_current_session)],
) -> Principal:
    return current[1]
