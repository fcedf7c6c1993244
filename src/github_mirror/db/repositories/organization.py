"""Repositories for organizations and the users seen alongside them."""

from sqlalchemy.ext.asyncio import AsyncSession

from github_mirror.db.models import ExternalUser, Organization

from .base import OwnedRepository


class OrganizationRepository(OwnedRepository[Organization]):
    """Organizations the owner belongs to, reconciled wholesale each sync."""

    natural_key = ("org_id",)

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Organization)


class ExternalUserRepository(OwnedRepository[ExternalUser]):
    """Org members and the owner's own profile.

    Rows are only ever upserted by a sync; they accumulate across syncs
    and are removed on disconnect.
    """

    natural_key = ("external_id",)

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ExternalUser)
