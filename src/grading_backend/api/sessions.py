from typing import Annotated, Tuple
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from grading_backend.api.auth import get_current_session, get_session_manager, get_session_token
from grading_backend.database import get_db
from grading_backend.interface.sessions import PrincipalGet, SessionGet, ValidateSessionResponse
from grading_backend.model.auth import Session as SessionModel
from grading_backend.permissions.principal import Principal
from grading_backend.permissions.sessions import SessionManager

session_router = APIRouter()

@session_router.get("/session", response_model=ValidateSessionResponse)
def get_session(
    current: Annotated[Tuple[SessionModel, Principal], Depends(get_current_session)],
):
    """Validate the request's session and return its principal"""
    session, principal = current
    return ValidateSessionResponse(
        principal=PrincipalGet(**principal.model_dump()),
        session=SessionGet.model_validate(session),
    )

@session_router.post("/logout", status_code=204)
def logout(
    request: Request,
    db: Session = Depends(get_db),
    manager: SessionManager = Depends(get_session_manager),
):
    manager.invalidate(db, get_session_token(request) or "")
    db.commit()
