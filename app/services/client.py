"""
Client service.
Handles client CRUD, scoped to the owning salesperson.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_

from app.core.exceptions import NotFoundError
from app.models.client import Client
from app.models.user import User
from app.schemas.client import ClientCreate, ClientUpdate


class ClientService:
    """Service for client operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _scoped(self, query, actor: User):
        """Salespeople only see their own clients."""
        if actor.is_privileged:
            return query
        return query.where(Client.owner_id == actor.id)

    async def create(self, owner: User, data: ClientCreate) -> Client:
        """
        Create a new client owned by a salesperson.

        Args:
            owner: Salesperson registering the client
            data: Client data

        Returns:
            Created client
        """
        client = Client(
            owner_id=owner.id,
            **data.model_dump(),
        )

        self.db.add(client)
        await self.db.flush()
        await self.db.refresh(client)

        return client

    async def get_by_id(self, client_id: int, actor: User) -> Client | None:
        """Get client by ID, ensuring the actor may see it."""
        query = self._scoped(select(Client).where(Client.id == client_id), actor)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_or_404(self, client_id: int, actor: User) -> Client:
        """
        Get client by ID or raise NotFoundError.

        Clients of other salespeople are reported as missing.
        """
        client = await self.get_by_id(client_id, actor)
        if not client:
            raise NotFoundError("Client non trouvé", {"client_id": client_id})
        return client

    async def list(
        self,
        actor: User,
        skip: int = 0,
        limit: int = 20,
        search: str | None = None,
    ) -> tuple[list[Client], int]:
        """
        List clients with pagination and search.

        Args:
            actor: Requesting staff member
            skip: Number of records to skip
            limit: Maximum records to return
            search: Search term for company, contact or tax document

        Returns:
            Tuple of (clients list, total count)
        """
        query = self._scoped(select(Client), actor)
        count_query = self._scoped(select(func.count(Client.id)), actor)

        if search:
            search_filter = f"%{search}%"
            condition = or_(
                Client.company_name.ilike(search_filter),
                Client.contact_name.ilike(search_filter),
                Client.tax_document.ilike(search_filter),
            )
            query = query.where(condition)
            count_query = count_query.where(condition)

        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        query = query.order_by(Client.company_name).offset(skip).limit(limit)
        result = await self.db.execute(query)
        clients = list(result.scalars().all())

        return clients, total

    async def update(self, client: Client, data: ClientUpdate) -> Client:
        """Apply the fields that were explicitly provided."""
        update_data = data.model_dump(exclude_unset=True)

        for field, value in update_data.items():
            setattr(client, field, value)

        await self.db.flush()
        await self.db.refresh(client)

        return client
