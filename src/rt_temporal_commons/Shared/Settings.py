import logging
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Settings priority:
#
# - Arguments passed when instantiating Settings(...)
# - RT_TEMPORAL_* environment variables
# - Default values in this class


class Settings(BaseSettings):
	"""
	Process-wide configuration of the engine.

	:param str timezone: IANA name of the zone naive timestamps are localised to, defaults to ``UTC``.
	:param float epsilon: Tolerance used for collinearity and coincidence tests, defaults to ``1e-6``.
	:param int maxDecimals: Default number of decimals kept by rounding and by the WKT and GeoJSON output of points, defaults to ``15``.
	:param int logSeverity: The `logging` level of the default logger, defaults to ``logging.INFO``.
	"""
	model_config = SettingsConfigDict(
		env_prefix="RT_TEMPORAL_",
		case_sensitive=False,
		populate_by_name=True,
		frozen=True,
		extra="ignore",
	)

	timezone: str = Field(default="UTC", description="Zone of naive timestamps")
	epsilon: float = Field(default=1e-6, ge=0, description="Tolerance of collinearity and coincidence tests")
	maxDecimals: int = Field(
		default=15,
		ge=0,
		validation_alias=AliasChoices("maxDecimals", "RT_TEMPORAL_MAX_DECIMALS"),
		description="Decimals kept by rounding",
	)
	logSeverity: int = Field(
		default=logging.INFO,
		validation_alias=AliasChoices("logSeverity", "RT_TEMPORAL_LOG_LEVEL"),
		description="Level of the default logger",
	)

	@field_validator("timezone")
	@classmethod
	def checkTimezone(cls, value: str) -> str:
		try:
			ZoneInfo(value)
		except (ZoneInfoNotFoundError, ValueError) as e:
			raise ValueError(f"Unknown timezone: {value}") from e
		return value

	@field_validator("logSeverity", mode="before")
	@classmethod
	def levelByName(cls, value: Any) -> Any:
		if not isinstance(value, str) or value.strip().isdigit(): return value
		level = logging.getLevelName(value.strip().upper())
		if not isinstance(level, int): raise ValueError(f"Unknown log level: {value}")
		return level

	@property
	def zone(self) -> ZoneInfo:
		return ZoneInfo(self.timezone)

	def copy(self, **changes) -> "Settings": # pyright: ignore[reportIncompatibleMethodOverride]
		"""A validated copy with `changes` applied."""
		return type(self)(**{**self.model_dump(), **changes})

	@classmethod
	def fromEnvironment(cls) -> "Settings":
		"""
		Build the settings from the ``RT_TEMPORAL_*`` environment variables.
		Unset variables keep their default values.
		"""
		return cls()
