"""
Commission schedule and its resolver.

The schedule is read from the active ``plan_settings`` row and validated
before any level is processed; a missing or malformed schedule is fatal for
the run because no safe default percentages exist.
"""

from decimal import Decimal
from typing import Any

from loguru import logger
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from sqlalchemy.ext.asyncio import AsyncSession

from levelpay.config.constants import (
    LEVEL_INCOME_FEATURE_KEY,
    MAX_COMMISSION_LEVELS,
    ZERO,
)
from levelpay.repositories.plan_setting_repository import (
    PlanSettingRepository,
)
from levelpay.utils.exceptions import ConfigMissing


class CommissionSchedule(BaseModel):
    """
    Validated, immutable level income schedule.

    Attributes:
        max_levels: Number of upline levels paid (1..30)
        level_percentages: Percent per level, index 0 = level 1
        require_level_unlock: Level N needs N direct recruits
        require_active_status: Recipient needs an active package
        min_package_amount: Purchases below this pay no level income
        feature_key: plan_settings key the schedule came from
        version: plan_settings version the schedule came from
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    max_levels: int = Field(ge=1, le=MAX_COMMISSION_LEVELS)
    level_percentages: tuple[Decimal, ...]
    require_level_unlock: bool = False
    require_active_status: bool = False
    min_package_amount: Decimal = Field(default=ZERO, ge=0)
    feature_key: str = LEVEL_INCOME_FEATURE_KEY
    version: int = 1

    @field_validator("level_percentages")
    @classmethod
    def validate_percentages(
        cls, v: tuple[Decimal, ...]
    ) -> tuple[Decimal, ...]:
        """Reject negative or non-finite percentages."""
        for index, percentage in enumerate(v, start=1):
            if not percentage.is_finite():
                raise ValueError(f"level {index} percentage is not a number")
            if percentage < 0:
                raise ValueError(f"level {index} percentage is negative")
        return v

    @model_validator(mode="after")
    def validate_length(self) -> "CommissionSchedule":
        """One percentage per level."""
        if len(self.level_percentages) != self.max_levels:
            raise ValueError(
                f"level_percentages has {len(self.level_percentages)} entries, "
                f"max_levels is {self.max_levels}"
            )
        return self

    @property
    def total_percentage(self) -> Decimal:
        """Sum of all level percentages."""
        return sum(self.level_percentages, ZERO)

    def percentage_for(self, level: int) -> Decimal:
        """Percentage paid at a 1-based level (0 outside the schedule)."""
        if 1 <= level <= self.max_levels:
            return self.level_percentages[level - 1]
        return ZERO

    def capped(self, max_levels: int) -> "CommissionSchedule":
        """Copy of the schedule limited to the first ``max_levels`` levels."""
        if max_levels >= self.max_levels:
            return self
        return self.model_copy(
            update={
                "max_levels": max_levels,
                "level_percentages": self.level_percentages[:max_levels],
            }
        )


class ConfigResolver:
    """Loads the active commission schedule."""

    def __init__(
        self,
        session: AsyncSession,
        feature_key: str = LEVEL_INCOME_FEATURE_KEY,
        max_levels_cap: int = MAX_COMMISSION_LEVELS,
    ) -> None:
        """
        Initialize config resolver.

        Args:
            session: Async database session
            feature_key: plan_settings key holding the schedule
            max_levels_cap: Upper bound applied on top of the payload
        """
        self.feature_key = feature_key
        self.max_levels_cap = max_levels_cap
        self.plan_repo = PlanSettingRepository(session)

    async def resolve(self) -> CommissionSchedule:
        """
        Load and validate the active schedule.

        Returns:
            CommissionSchedule

        Raises:
            ConfigMissing: No active schedule, or its payload is invalid
        """
        setting = await self.plan_repo.get_active(self.feature_key)
        if setting is None:
            raise ConfigMissing(self.feature_key, "no active plan setting")

        schedule = self.parse_payload(setting.payload, setting.version)

        logger.debug(
            "Commission schedule resolved",
            extra={
                "feature_key": self.feature_key,
                "version": schedule.version,
                "max_levels": schedule.max_levels,
            },
        )
        return schedule.capped(self.max_levels_cap)

    def parse_payload(
        self, payload: Any, version: int = 1
    ) -> CommissionSchedule:
        """
        Validate a raw schedule payload.

        Args:
            payload: JSON payload from plan_settings
            version: plan_settings version

        Returns:
            CommissionSchedule

        Raises:
            ConfigMissing: Payload does not match the schedule schema
        """
        if not isinstance(payload, dict):
            raise ConfigMissing(
                self.feature_key, "payload is not a JSON object"
            )

        try:
            return CommissionSchedule.model_validate(
                {**payload, "feature_key": self.feature_key, "version": version}
            )
        except ValidationError as exc:
            logger.error(
                "Invalid commission schedule payload",
                extra={
                    "feature_key": self.feature_key,
                    "version": version,
                    "errors": exc.errors(include_url=False),
                },
            )
            raise ConfigMissing(
                self.feature_key,
                f"invalid payload ({exc.error_count()} validation error(s))",
            ) from exc
