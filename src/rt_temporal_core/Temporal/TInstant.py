from datetime import datetime
from typing import Any

from rt_temporal_commons.Utils import Time
from rt_temporal_core.Temporal.Domains import ValueDomain, inferDomain
from rt_temporal_core.Temporal.Interpolation import TInterpolation
from rt_temporal_core.Temporal.Temporal import Piece, Temporal


class TInstant(Temporal):
	"""A value at a single timestamp."""
	def __init__(self, value: Any, timestamp: datetime | str, domain: ValueDomain | None = None) -> None:
		domain = inferDomain(value) if domain is None else domain
		super().__init__(domain)
		self.__value: Any = domain.validate(value)
		self.__timestamp: datetime = Time.toTimestamp(timestamp)
		return

	@property
	def value(self) -> Any:
		return self.__value

	@property
	def timestamp(self) -> datetime:
		return self.__timestamp

	@property
	def interpolation(self) -> TInterpolation:
		return TInterpolation.NONE

	def pieces(self) -> list[Piece]:
		return [Piece((self,), True, True)]

	def valueAtTimestamp(self, timestamp: datetime | str) -> Any:
		if Time.toTimestamp(timestamp) == self.__timestamp: return self.__value
		return None

	def withValue(self, value: Any) -> "TInstant":
		return TInstant(value, self.__timestamp, self.domain)

	def withTimestamp(self, timestamp: datetime) -> "TInstant":
		return TInstant(self.__value, timestamp, self.domain)

	def _mapTimestamps(self, fn) -> "TInstant":
		return self.withTimestamp(fn(self.__timestamp))
