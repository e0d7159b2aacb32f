"""
运动记录数据模型
"""
from __future__ import annotations

from sqlalchemy import BigInteger, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from slam.database.base import Base


class SportRow(Base):
    """运动记录（extra / tracks 以 JSON 文本存储）"""

    __tablename__ = "sports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uid: Mapped[int] = mapped_column(Integer, nullable=False, default=0, comment="所属用户")
    type: Mapped[str] = mapped_column(String(32), nullable=False, comment="运动类型")
    start_time: Mapped[int] = mapped_column(BigInteger, nullable=False, comment="开始时间(epoch秒)")

    calories: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    distance_meter: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    duration_second: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    heart_rate_avg: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    heart_rate_max: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pace_average: Mapped[str] = mapped_column(Text, nullable=False, default="")

    extra: Mapped[str] = mapped_column(Text, nullable=False, default="null", comment="附加数据JSON")
    tracks: Mapped[str] = mapped_column(Text, nullable=False, default="[]", comment="分段JSON")

    __table_args__ = (
        Index("idx_sports_uid_start_time", "uid", "start_time"),
    )

    def __repr__(self):
        return f"<SportRow id={self.id} uid={self.uid} type={self.type} start_time={self.start_time}>"
