"""FastAPI dependency providers for repositories and services.

Separated from ``dependencies.py`` so route modules can import the
type aliases without pulling in engine construction.
"""

from typing import Annotated

from fastapi import Depends

from pmhub.dependencies import DBSession
from pmhub.repositories.user_repository import UserRepository
from pmhub.services.hierarchy_service import UserHierarchyService

# ---------------------------------------------------------------------------
# Repository providers
# ---------------------------------------------------------------------------


def get_user_repository(db: DBSession) -> UserRepository:
    return UserRepository(db)


UserRepo = Annotated[UserRepository, Depends(get_user_repository)]

# ---------------------------------------------------------------------------
# Service providers
# ---------------------------------------------------------------------------


def get_hierarchy_service(repo: UserRepo) -> UserHierarchyService:
    return UserHierarchyService(repo)


HierarchySvc = Annotated[UserHierarchyService, Depends(get_hierarchy_service)]
