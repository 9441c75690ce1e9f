"""SQLAlchemy implementation of VideoRepository."""

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from vidiary.domain.video.model.aggregate import VideoRecord
from vidiary.domain.video.model.value import VideoId
from vidiary.domain.video.port.repository import VideoRepository
from vidiary.infrastructure.persistence.mappers.video import row_to_video, video_to_dict
from vidiary.infrastructure.persistence.tables import videos_table


class SQLAlchemyVideoRepository(VideoRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def save(self, record: VideoRecord) -> None:
        """Insert or fully replace a clip. A replaced clip keeps its position."""
        video_dict = video_to_dict(record)

        stmt = select(videos_table.c.seq).where(videos_table.c.id == video_dict["id"])
        existing = (await self.session.execute(stmt)).scalar_one_or_none()

        if existing is not None:
            stmt = (
                update(videos_table)
                .where(videos_table.c.id == video_dict["id"])
                .values(**video_dict)
            )
        else:
            next_seq = select(func.coalesce(func.max(videos_table.c.seq), 0) + 1)
            seq = (await self.session.execute(next_seq)).scalar_one()
            stmt = insert(videos_table).values(seq=seq, **video_dict)

        await self.session.execute(stmt)
        await self.session.flush()

    async def get(self, video_id: VideoId) -> VideoRecord | None:
        stmt = select(videos_table).where(videos_table.c.id == str(video_id))
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_video(dict(row)) if row else None

    async def find_by_date(self, day: str) -> list[VideoRecord]:
        stmt = (
            select(videos_table)
            .where(videos_table.c.date == day)
            .order_by(videos_table.c.seq)
        )
        result = await self.session.execute(stmt)
        return [row_to_video(dict(r)) for r in result.mappings().all()]

    async def list_all(self) -> list[VideoRecord]:
        stmt = select(videos_table).order_by(videos_table.c.seq)
        result = await self.session.execute(stmt)
        return [row_to_video(dict(r)) for r in result.mappings().all()]

    async def delete(self, video_id: VideoId) -> None:
        stmt = delete(videos_table).where(videos_table.c.id == str(video_id))
        await self.session.execute(stmt)
        await self.session.flush()

    async def delete_all(self) -> None:
        await self.session.execute(delete(videos_table))
        await self.session.flush()

    async def count(self) -> int:
        stmt = select(func.count()).select_from(videos_table)
        result = await self.session.execute(stmt)
        return result.scalar_one()
