"""
运动记录服务

写操作（新增/更新/删除/导入）成功后使受影响的统计缓存失效：
总量缓存按 uid 无条件失效，年度缓存按涉及到的每个年份失效。
统计读取先查缓存，未命中时计算并回填（仅 Total 与 Year 两种范围）。

已知缺口：读取路径的“查询 -> 计算 -> 回填”与并发写入的“修改 -> 失效”之间没有隔离，
在失效之后完成的读取仍可能回填旧结果；配置 CACHE_TTL_SECONDS 可限定其存活时间。
"""
import logging
from typing import Hashable, Iterable, List, Optional, Set, Tuple, Union

from slam.cache.base import ResultCache, year_key
from slam.exceptions import CacheError, RepositoryError, ValidationError
from slam.integrations.factory import VendorParserFactory, open_csv
from slam.repositories.base import SportRepository
from slam.schemas.sport import SportRecord
from slam.schemas.stats import StatKind, StatsParam, StatSummary
from slam.services.stats import resolve_window, summarize
from slam.utils.datetime_helper import year_of_timestamp

logger = logging.getLogger(__name__)


class SportService:
    """运动记录服务"""

    def __init__(
        self,
        repository: SportRepository,
        cache_total: ResultCache,
        cache_year: ResultCache,
    ):
        self.repository = repository
        self.cache_total = cache_total
        self.cache_year = cache_year

    # ------------------------------------------------------------------
    # 缓存失效
    # ------------------------------------------------------------------

    async def _invalidate(self, uid: int, start_times: Iterable[int]) -> None:
        """
        使总量缓存与涉及年份的年度缓存失效

        每个键都会尝试；任一失败时记录日志，全部尝试完后统一抛出。

        Raises:
            CacheError: 至少一个键失效失败（存储写入已提交，不应重试写操作）
        """
        years: Set[int] = set()
        for ts in start_times:
            year = year_of_timestamp(ts)
            if year is not None:
                years.add(year)

        targets: List[Tuple[ResultCache, Hashable]] = [(self.cache_total, uid)]
        targets.extend((self.cache_year, year_key(uid, year)) for year in sorted(years))

        failed: List[str] = []
        for cache, key in targets:
            try:
                await cache.invalidate(key)
            except CacheError as e:
                logger.error(f"统计缓存失效失败: uid={uid}, key={key} - {e}")
                failed.append(str(key))
        if failed:
            raise CacheError(f"统计缓存失效失败: keys={', '.join(failed)}")
        logger.debug(f"统计缓存已失效: uid={uid}, years={sorted(years)}")

    # ------------------------------------------------------------------
    # 写操作
    # ------------------------------------------------------------------

    async def insert(self, uid: int, sport: SportRecord) -> int:
        """
        新增运动记录

        Args:
            uid: 用户ID
            sport: 运动记录（id 忽略）

        Returns:
            新记录ID

        Raises:
            ValidationError: extra 与类型不一致
            RepositoryError: 存储失败
            CacheError: 写入已提交但统计缓存失效失败
        """
        sport.validate_type_consistency()
        try:
            sport_id = await self.repository.insert(uid, sport)
        except RepositoryError as e:
            logger.error(f"新增运动记录失败: uid={uid} - {e}")
            raise
        await self._invalidate(uid, [sport.start_time])
        logger.info(f"新增运动记录: uid={uid}, id={sport_id}, type={sport.kind.value}")
        return sport_id

    async def update(self, uid: int, sport: SportRecord) -> None:
        """
        更新运动记录（旧记录与新记录所在年份的缓存都会失效）

        Raises:
            ValidationError: ID 非法或 extra 与类型不一致
            RepositoryError: 记录不存在或存储失败
            CacheError: 写入已提交但统计缓存失效失败
        """
        if sport.id <= 0:
            raise ValidationError("invalid sport id")
        sport.validate_type_consistency()
        try:
            old = await self.repository.get_by_id(uid, sport.id)
            await self.repository.update(uid, sport)
        except RepositoryError as e:
            logger.error(f"更新运动记录失败: uid={uid}, id={sport.id} - {e}")
            raise
        start_times = [sport.start_time]
        if old is not None:
            start_times.append(old.start_time)
        await self._invalidate(uid, start_times)
        logger.info(f"更新运动记录: uid={uid}, id={sport.id}")

    async def delete(self, uid: int, sport_id: int) -> None:
        """
        删除运动记录

        Raises:
            RepositoryError: 记录不存在或存储失败
            CacheError: 写入已提交但统计缓存失效失败
        """
        try:
            old = await self.repository.get_by_id(uid, sport_id)
            await self.repository.remove(uid, sport_id)
        except RepositoryError as e:
            logger.error(f"删除运动记录失败: uid={uid}, id={sport_id} - {e}")
            raise
        await self._invalidate(uid, [old.start_time] if old is not None else [])
        logger.info(f"删除运动记录: uid={uid}, id={sport_id}")

    async def import_csv(self, uid: int, vendor: str, data: Union[str, bytes]) -> int:
        """
        导入厂商CSV

        Args:
            uid: 用户ID
            vendor: 厂商名称（大小写不敏感）
            data: CSV 文件内容

        Returns:
            插入条数；没有可用行时返回 0 且不写库

        Raises:
            UnsupportedVendorError: 未知的厂商
            ValidationError: 某一行 extra 与类型不一致（整批拒绝）
            RepositoryError: 存储失败
            CacheError: 写入已提交但统计缓存失效失败
        """
        parser = VendorParserFactory.create(vendor)
        sports = parser.parse(open_csv(data))
        if not sports:
            logger.warning(f"CSV导入没有可用的记录: uid={uid}, vendor={vendor}")
            return 0

        for index, sport in enumerate(sports):
            try:
                sport.validate_type_consistency()
            except ValidationError as e:
                raise ValidationError(f"row {index}: {e.message}")

        try:
            inserted = await self.repository.insert_many(uid, sports)
        except RepositoryError as e:
            logger.error(f"CSV导入失败: uid={uid}, vendor={vendor} - {e}")
            raise
        await self._invalidate(uid, [s.start_time for s in sports])
        logger.info(f"CSV导入完成: uid={uid}, vendor={parser.name}, inserted={inserted}")
        return inserted

    # ------------------------------------------------------------------
    # 读操作
    # ------------------------------------------------------------------

    async def list(self, uid: int, page: int = 0, size: int = 20) -> List[SportRecord]:
        """分页查询运动记录（按开始时间倒序）"""
        return await self.repository.list(uid, page, size)

    async def get(self, uid: int, sport_id: int) -> Optional[SportRecord]:
        """查询单条运动记录"""
        return await self.repository.get_by_id(uid, sport_id)

    async def stats(self, uid: int, param: StatsParam) -> StatSummary:
        """
        统计运动数据

        Args:
            uid: 用户ID
            param: 统计范围参数

        Returns:
            统计结果

        Raises:
            ValidationError: 月份/周数/年份非法
            RepositoryError: 查询失败
        """
        cache, key = self._cache_for(uid, param)
        if cache is not None:
            cached = await cache.get(key)
            if cached is not None:
                return cached

        start_time, end_time = resolve_window(param)
        sports = await self.repository.list_by_time_range(uid, start_time, end_time)

        earliest_year = None
        if param.kind == StatKind.YEAR:
            earliest_year = await self._earliest_year(uid)

        summary = summarize(param.kind, sports, earliest_year)
        logger.info(
            f"统计计算完成: uid={uid}, kind={param.kind.value}, year={param.year}, "
            f"count={summary.total_count}"
        )

        if cache is not None:
            await cache.set(key, summary)
        return summary

    def _cache_for(self, uid: int, param: StatsParam):
        if param.kind == StatKind.TOTAL:
            return self.cache_total, uid
        if param.kind == StatKind.YEAR:
            return self.cache_year, year_key(uid, param.year)
        return None, None

    async def _earliest_year(self, uid: int) -> Optional[int]:
        try:
            first = await self.repository.get_first(uid)
        except RepositoryError as e:
            logger.warning(f"查询最早记录失败: uid={uid} - {e}")
            return None
        return year_of_timestamp(first.start_time) if first else None
