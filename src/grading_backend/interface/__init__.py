from .sessions import PrincipalGet, SessionGet, ValidateSessionResponse
from .collaborators import CollaboratorCreate, CollaboratorUpdate, CollaboratorGet

__all__ = [
    'PrincipalGet',
    'SessionGet',
    'ValidateSessionResponse',
    'CollaboratorCreate',
    'CollaboratorUpdate',
    'CollaboratorGet',
]
