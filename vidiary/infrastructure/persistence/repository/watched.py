"""SQLAlchemy implementation of WatchedRepository."""

from datetime import UTC, datetime

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from vidiary.domain.video.port.repository import WatchedRepository
from vidiary.infrastructure.persistence.tables import watched_movies_table


class SQLAlchemyWatchedRepository(WatchedRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def set(self, day: str, watched: bool) -> None:
        values = {"watched": watched, "updated_at": datetime.now(UTC)}

        stmt = select(watched_movies_table.c.date).where(watched_movies_table.c.date == day)
        exists = (await self.session.execute(stmt)).first() is not None

        if exists:
            stmt = (
                update(watched_movies_table)
                .where(watched_movies_table.c.date == day)
                .values(**values)
            )
        else:
            stmt = insert(watched_movies_table).values(date=day, **values)

        await self.session.execute(stmt)
        await self.session.flush()

    async def get(self, day: str) -> bool:
        stmt = select(watched_movies_table.c.watched).where(watched_movies_table.c.date == day)
        result = await self.session.execute(stmt)
        return bool(result.scalar_one_or_none())

    async def list_watched(self) -> list[str]:
        stmt = (
            select(watched_movies_table.c.date)
            .where(watched_movies_table.c.watched.is_(True))
            .order_by(watched_movies_table.c.date)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
