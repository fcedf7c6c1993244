"""Read API over the mirrored collections.

Endpoints (all under /api/github):
- GET /status - Connection status (no session required)
- POST /remove - Disconnect and delete every mirrored row
- GET /profile, /organizations, /repositories, /summary, /sync-status
- GET /repositories/{owner}/{repo}/commits|pulls|issues|releases
- GET /{entity}?search=&page=&limit= - Generic paginated listing
  (/organizations returns a page too once any of those parameters is given)

The generic ``/{entity}`` route is registered last so it never shadows
the fixed paths above.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from github_mirror.db.repositories import (
    CommitRepository,
    ExternalUserRepository,
    IssueRepository,
    OrganizationRepository,
    OwnedRepository,
    PullRequestRepository,
    ReleaseRepository,
    RepositoryRepository,
)
from github_mirror.github.integration import IntegrationService
from github_mirror.schemas import (
    ApiSchema,
    CommitRead,
    ExternalUserRead,
    IntegrationStatus,
    IssueRead,
    OrganizationRead,
    Page,
    ProfileRead,
    PullRequestRead,
    ReleaseRead,
    RepositoryRead,
    SummaryRead,
    SyncStatusRead,
)

from ..dependencies import get_current_owner, get_db, get_optional_owner
from ..errors import ApiError, UnknownEntityError

router = APIRouter(prefix="/api/github", tags=["github"])

DEFAULT_LIMIT = 50

# Generic listing: entity name -> (repository class, read schema)
ENTITIES: dict[str, tuple[type[OwnedRepository[Any]], type[ApiSchema]]] = {
    "organizations": (OrganizationRepository, OrganizationRead),
    "repos": (RepositoryRepository, RepositoryRead),
    "commits": (CommitRepository, CommitRead),
    "pulls": (PullRequestRepository, PullRequestRead),
    "issues": (IssueRepository, IssueRead),
    "changelogs": (ReleaseRepository, ReleaseRead),
    "users": (ExternalUserRepository, ExternalUserRead),
}


def _dump(schema: type[ApiSchema], rows: list[Any]) -> list[dict[str, Any]]:
    return [schema.from_orm(row).model_dump(by_alias=True, mode="json") for row in rows]


async def _list_page(
    db: AsyncSession, owner_id: str, entity: str, search: str | None, page: int, limit: int
) -> Page:
    repository_class, schema = ENTITIES[entity]
    rows, total = await repository_class(db).search(owner_id, search, page=page, limit=limit)
    return Page(data=_dump(schema, rows), page=page, limit=limit, total=total)


# -----------------------------------------------------------------------------
# Connection
# -----------------------------------------------------------------------------
@router.get("/status", response_model=IntegrationStatus, response_model_exclude_none=True)
async def get_status(
    owner_id: str | None = Depends(get_optional_owner),
    db: AsyncSession = Depends(get_db),
) -> IntegrationStatus:
    return await IntegrationService(db).status(owner_id)


@router.post("/remove")
async def remove_integration(
    request: Request,
    owner_id: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db),
) -> dict[str, bool]:
    """Delete the integration and all of its data, then end the session."""
    await IntegrationService(db).disconnect(owner_id)
    request.session.clear()
    return {"success": True}


# -----------------------------------------------------------------------------
# Fixed read endpoints
# -----------------------------------------------------------------------------
@router.get("/profile", response_model=ProfileRead)
async def get_profile(
    owner_id: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db),
) -> ProfileRead:
    profile = await IntegrationService(db).profile(owner_id)
    if profile is None:
        raise ApiError(404, "Integration not found")
    return profile


@router.get("/organizations", response_model=None)
async def get_organizations(
    search: str | None = None,
    page: int | None = Query(default=None, ge=1),
    limit: int | None = Query(default=None, ge=1, le=500),
    owner_id: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]] | Page:
    """Every organization, or a page of them when any listing parameter is given.

    This path shadows ``/{entity}`` for ``organizations``, so it answers
    the generic listing's query parameters the same way.
    """
    if search is None and page is None and limit is None:
        return _dump(OrganizationRead, await OrganizationRepository(db).list_for_owner(owner_id))
    return await _list_page(db, owner_id, "organizations", search, page or 1, limit or DEFAULT_LIMIT)


@router.get("/repositories")
async def get_repositories(
    owner_id: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]]:
    return _dump(RepositoryRead, await RepositoryRepository(db).list_for_owner(owner_id))


@router.get("/repositories/{full_name:path}/commits")
async def get_repository_commits(
    full_name: str,
    owner_id: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]]:
    return _dump(CommitRead, await CommitRepository(db).list_for_repo(owner_id, full_name))


@router.get("/repositories/{full_name:path}/pulls")
async def get_repository_pulls(
    full_name: str,
    owner_id: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]]:
    return _dump(PullRequestRead, await PullRequestRepository(db).list_for_repo(owner_id, full_name))


@router.get("/repositories/{full_name:path}/issues")
async def get_repository_issues(
    full_name: str,
    owner_id: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]]:
    return _dump(IssueRead, await IssueRepository(db).list_for_repo(owner_id, full_name))


@router.get("/repositories/{full_name:path}/releases")
async def get_repository_releases(
    full_name: str,
    owner_id: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]]:
    return _dump(ReleaseRead, await ReleaseRepository(db).list_for_repo(owner_id, full_name))


@router.get("/summary", response_model=SummaryRead)
async def get_summary(
    owner_id: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db),
) -> SummaryRead:
    return await IntegrationService(db).summary(owner_id)


@router.get("/sync-status")
async def get_sync_status(
    owner_id: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """The owner's SyncStatus record, or ``{}`` before the first sync."""
    status = await IntegrationService(db).sync_status(owner_id)
    if status is None:
        return {}
    return SyncStatusRead.from_orm(status).model_dump(by_alias=True, mode="json")


# -----------------------------------------------------------------------------
# Generic listing (must stay last)
# -----------------------------------------------------------------------------
@router.get("/{entity}", response_model=Page)
async def get_entity_data(
    entity: str,
    search: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=500),
    owner_id: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db),
) -> Page:
    """Page through one collection, optionally filtered by a search term."""
    if entity not in ENTITIES:
        raise UnknownEntityError(entity)
    return await _list_page(db, owner_id, entity, search, page, limit)
