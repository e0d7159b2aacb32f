"""
运动记录存储抽象接口
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from slam.config import settings
from slam.schemas.sport import SportRecord


def clamp_page(page: Optional[int], size: Optional[int]) -> Tuple[int, int]:
    """
    规范化分页参数

    size <= 0 或缺省时取默认值，超过上限时截断；page 为负时取 0。
    """
    if size is None or size <= 0:
        size = settings.LIST_PAGE_SIZE_DEFAULT
    size = min(size, settings.LIST_PAGE_SIZE_MAX)
    page = max(page or 0, 0)
    return page, size


class SportRepository(ABC):
    """运动记录存储接口，所有操作都以 uid 限定归属，失败时抛出 RepositoryError"""

    @abstractmethod
    async def insert(self, uid: int, sport: SportRecord) -> int:
        """
        新增记录

        Returns:
            新记录ID
        """
        pass

    @abstractmethod
    async def insert_many(self, uid: int, sports: List[SportRecord]) -> int:
        """
        批量新增（同一事务）

        Returns:
            插入条数
        """
        pass

    @abstractmethod
    async def list(self, uid: int, page: int, size: int) -> List[SportRecord]:
        """按开始时间倒序分页查询"""
        pass

    @abstractmethod
    async def list_by_time_range(self, uid: int, start_time: int, end_time: int) -> List[SportRecord]:
        """查询 [start_time, end_time) 内的记录，按开始时间倒序"""
        pass

    @abstractmethod
    async def update(self, uid: int, sport: SportRecord) -> None:
        """按 sport.id 更新记录"""
        pass

    @abstractmethod
    async def remove(self, uid: int, sport_id: int) -> None:
        """删除记录"""
        pass

    @abstractmethod
    async def get_by_id(self, uid: int, sport_id: int) -> Optional[SportRecord]:
        """按ID查询，不存在或不属于该用户时返回None"""
        pass

    @abstractmethod
    async def get_first(self, uid: int) -> Optional[SportRecord]:
        """查询该用户最早的一条记录"""
        pass
