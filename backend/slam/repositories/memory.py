"""
内存版运动记录存储（测试与本地运行）
"""
import asyncio
from typing import Dict, List, Optional, Tuple

from slam.exceptions import RepositoryError
from slam.repositories.base import SportRepository, clamp_page
from slam.schemas.sport import SportRecord


class MemorySportRepository(SportRepository):
    """以 (uid, id) 为键保存记录副本"""

    def __init__(self):
        self._rows: Dict[int, Tuple[int, SportRecord]] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()
        self.calls: List[str] = []  # 调用记录，便于观察缓存是否命中

    def _store(self, uid: int, sport: SportRecord) -> int:
        sport_id = self._next_id
        self._next_id += 1
        self._rows[sport_id] = (uid, sport.model_copy(update={"id": sport_id}, deep=True))
        return sport_id

    def _owned(self, uid: int) -> List[SportRecord]:
        rows = [s for owner, s in self._rows.values() if owner == uid]
        rows.sort(key=lambda s: (s.start_time, s.id), reverse=True)
        return rows

    async def insert(self, uid: int, sport: SportRecord) -> int:
        self.calls.append("insert")
        async with self._lock:
            return self._store(uid, sport)

    async def insert_many(self, uid: int, sports: List[SportRecord]) -> int:
        self.calls.append("insert_many")
        async with self._lock:
            for sport in sports:
                self._store(uid, sport)
            return len(sports)

    async def list(self, uid: int, page: int, size: int) -> List[SportRecord]:
        self.calls.append("list")
        page, size = clamp_page(page, size)
        rows = self._owned(uid)[page * size:(page + 1) * size]
        return [s.model_copy(deep=True) for s in rows]

    async def list_by_time_range(self, uid: int, start_time: int, end_time: int) -> List[SportRecord]:
        self.calls.append("list_by_time_range")
        return [
            s.model_copy(deep=True)
            for s in self._owned(uid)
            if start_time <= s.start_time < end_time
        ]

    async def update(self, uid: int, sport: SportRecord) -> None:
        self.calls.append("update")
        if sport.id <= 0:
            raise RepositoryError("invalid sport id")
        async with self._lock:
            row = self._rows.get(sport.id)
            if row is None or row[0] != uid:
                raise RepositoryError("记录不存在或无权限")
            self._rows[sport.id] = (uid, sport.model_copy(deep=True))

    async def remove(self, uid: int, sport_id: int) -> None:
        self.calls.append("remove")
        if sport_id <= 0:
            raise RepositoryError("invalid sport id")
        async with self._lock:
            row = self._rows.get(sport_id)
            if row is None or row[0] != uid:
                raise RepositoryError("记录不存在或无权限")
            del self._rows[sport_id]

    async def get_by_id(self, uid: int, sport_id: int) -> Optional[SportRecord]:
        self.calls.append("get_by_id")
        row = self._rows.get(sport_id)
        if row is None or row[0] != uid:
            return None
        return row[1].model_copy(deep=True)

    async def get_first(self, uid: int) -> Optional[SportRecord]:
        self.calls.append("get_first")
        rows = self._owned(uid)
        if not rows:
            return None
        return min(rows, key=lambda s: (s.start_time, s.id)).model_copy(deep=True)
