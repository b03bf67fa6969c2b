"""Global settings models."""

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from deploystack.storage.database.base import Base, TimestampMixin


class GlobalSettingGroupModel(Base, TimestampMixin):
    """Settings group."""

    __tablename__ = "global_setting_groups"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    icon: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<GlobalSettingGroupModel(id='{self.id}', name='{self.name}')>"


class GlobalSettingModel(Base, TimestampMixin):
    """Single key/value setting."""

    __tablename__ = "global_settings"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, default="", nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_encrypted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    group_id: Mapped[Optional[str]] = mapped_column(
        String(100),
        ForeignKey("global_setting_groups.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<GlobalSettingModel(key='{self.key}', group_id='{self.group_id}')>"
