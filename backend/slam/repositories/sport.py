"""
基于 SQLAlchemy 的运动记录存储
"""
import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from slam.exceptions import RepositoryError
from slam.models.sport import SportRow
from slam.repositories.base import SportRepository, clamp_page
from slam.repositories.compat import encode_extra, encode_tracks, parse_extra_compat, parse_tracks_compat
from slam.schemas.sport import SportKind, SportRecord

logger = logging.getLogger(__name__)


def _apply(row: SportRow, sport: SportRecord) -> SportRow:
    """把记录字段写入行对象（id/uid 除外）"""
    row.type = sport.kind.value
    row.start_time = sport.start_time
    row.calories = sport.calories
    row.distance_meter = sport.distance_meter
    row.duration_second = sport.duration_second
    row.heart_rate_avg = sport.heart_rate_avg
    row.heart_rate_max = sport.heart_rate_max
    row.pace_average = sport.pace_average
    row.extra = encode_extra(sport.extra)
    row.tracks = encode_tracks(sport.tracks)
    return row


def _to_record(row: SportRow) -> SportRecord:
    return SportRecord(
        id=row.id,
        kind=SportKind.from_str(row.type),
        start_time=row.start_time,
        calories=row.calories,
        distance_meter=row.distance_meter,
        duration_second=row.duration_second,
        heart_rate_avg=row.heart_rate_avg,
        heart_rate_max=row.heart_rate_max,
        pace_average=row.pace_average,
        extra=parse_extra_compat(row.extra),
        tracks=parse_tracks_compat(row.tracks),
    )


class SqlSportRepository(SportRepository):
    """sports 表的存储实现"""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def insert(self, uid: int, sport: SportRecord) -> int:
        try:
            async with self.session_factory() as db:
                row = _apply(SportRow(uid=uid), sport)
                db.add(row)
                await db.commit()
                return row.id
        except SQLAlchemyError as e:
            raise RepositoryError(f"插入失败: {e}")

    async def insert_many(self, uid: int, sports: List[SportRecord]) -> int:
        try:
            async with self.session_factory() as db:
                async with db.begin():
                    db.add_all([_apply(SportRow(uid=uid), s) for s in sports])
                return len(sports)
        except SQLAlchemyError as e:
            raise RepositoryError(f"提交事务失败: {e}")

    async def list(self, uid: int, page: int, size: int) -> List[SportRecord]:
        page, size = clamp_page(page, size)
        stmt = (
            select(SportRow)
            .where(SportRow.uid == uid)
            .order_by(SportRow.start_time.desc(), SportRow.id.desc())
            .offset(page * size)
            .limit(size)
        )
        return await self._fetch_all(stmt)

    async def list_by_time_range(self, uid: int, start_time: int, end_time: int) -> List[SportRecord]:
        stmt = (
            select(SportRow)
            .where(
                SportRow.uid == uid,
                SportRow.start_time >= start_time,
                SportRow.start_time < end_time,
            )
            .order_by(SportRow.start_time.desc(), SportRow.id.desc())
        )
        return await self._fetch_all(stmt)

    async def update(self, uid: int, sport: SportRecord) -> None:
        if sport.id <= 0:
            raise RepositoryError("invalid sport id")
        try:
            async with self.session_factory() as db:
                row = await db.get(SportRow, sport.id)
                if row is None or row.uid != uid:
                    raise RepositoryError("记录不存在或无权限")
                _apply(row, sport)
                await db.commit()
        except SQLAlchemyError as e:
            raise RepositoryError(f"更新失败: {e}")

    async def remove(self, uid: int, sport_id: int) -> None:
        if sport_id <= 0:
            raise RepositoryError("invalid sport id")
        try:
            async with self.session_factory() as db:
                result = await db.execute(
                    delete(SportRow).where(SportRow.id == sport_id, SportRow.uid == uid)
                )
                await db.commit()
        except SQLAlchemyError as e:
            raise RepositoryError(f"删除失败: {e}")
        if result.rowcount == 0:
            raise RepositoryError("记录不存在或无权限")

    async def get_by_id(self, uid: int, sport_id: int) -> Optional[SportRecord]:
        if sport_id <= 0:
            return None
        stmt = select(SportRow).where(SportRow.id == sport_id, SportRow.uid == uid)
        return await self._fetch_one(stmt)

    async def get_first(self, uid: int) -> Optional[SportRecord]:
        stmt = (
            select(SportRow)
            .where(SportRow.uid == uid)
            .order_by(SportRow.start_time.asc(), SportRow.id.asc())
            .limit(1)
        )
        return await self._fetch_one(stmt)

    async def _fetch_all(self, stmt) -> List[SportRecord]:
        try:
            async with self.session_factory() as db:
                result = await db.execute(stmt)
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise RepositoryError(f"查询失败: {e}")
        return [_to_record(row) for row in rows]

    async def _fetch_one(self, stmt) -> Optional[SportRecord]:
        try:
            async with self.session_factory() as db:
                result = await db.execute(stmt)
                row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise RepositoryError(f"查询失败: {e}")
        return _to_record(row) if row else None
