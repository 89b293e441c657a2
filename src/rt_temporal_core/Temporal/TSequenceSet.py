from bisect import bisect_right
from datetime import datetime
from typing import Any, Iterable

from rt_temporal_commons.Shared.Errors import DomainError
from rt_temporal_commons.Utils import Time
from rt_temporal_core.Temporal.Interpolation import TInterpolation
from rt_temporal_core.Temporal.Temporal import Piece, Temporal
from rt_temporal_core.Temporal.TSequence import TSequence, joinPieces, pieceValueAt


class TSequenceSet(Temporal):
	"""
	A value defined over several disjoint intervals of time, with gaps in between.
	All the sequences share one continuous interpolation.
	"""
	def __init__(self, sequences: Iterable[TSequence], normalize: bool = True) -> None:
		sequenceList = list(sequences)
		if len(sequenceList) == 0: raise DomainError("A sequence set has at least one sequence.")
		domain = sequenceList[0].domain
		interpolation = sequenceList[0].interpolation
		super().__init__(domain)
		if any(s.domain != domain for s in sequenceList): raise DomainError("All the sequences of a set share one domain.")
		if any(s.interpolation is not interpolation for s in sequenceList): raise DomainError("All the sequences of a set share one interpolation.")
		if not interpolation.isContinuous: raise DomainError("A sequence set is made of continuous sequences.")
		sequenceList.sort(key=lambda s: s.startTimestamp())
		for i in range(1, len(sequenceList)):
			(prev, cur) = (sequenceList[i - 1].pieces()[0], sequenceList[i].pieces()[0])
			if cur.start < prev.end or (cur.start == prev.end and prev.upperInc and cur.lowerInc):
				raise DomainError(f"The sequences of a set may not overlap: {sequenceList[i - 1]} and {sequenceList[i]}")
		if normalize:
			pieces = joinPieces([s.pieces()[0] for s in sequenceList], interpolation, domain)
			sequenceList = [TSequence.fromPiece(p, interpolation) for p in pieces]
		self.__sequences: tuple[TSequence, ...] = tuple(sequenceList)
		self.__interpolation: TInterpolation = interpolation
		return

	@property
	def interpolation(self) -> TInterpolation:
		return self.__interpolation

	def pieces(self) -> list[Piece]:
		return [s.pieces()[0] for s in self.__sequences]

	def valueAtTimestamp(self, timestamp: datetime | str) -> Any:
		t = Time.toTimestamp(timestamp)
		i = bisect_right(self.__sequences, t, key=lambda s: s.startTimestamp()) - 1
		# A sequence starting exclusively at t may follow one ending inclusively at t.
		for j in (i, i - 1):
			if j < 0: continue
			value = pieceValueAt(self.__sequences[j].pieces()[0], t, self.__interpolation, self.domain)
			if value is not None: return value
		return None

	def sequences(self) -> list[TSequence]:
		return list(self.__sequences)

	def numSequences(self) -> int:
		return len(self.__sequences)

	def sequenceN(self, n: int) -> TSequence | None:
		if n < 0 or n >= len(self.__sequences): return None
		return self.__sequences[n]

	def startSequence(self) -> TSequence:
		return self.__sequences[0]

	def endSequence(self) -> TSequence:
		return self.__sequences[-1]

	def _mapTimestamps(self, fn) -> "TSequenceSet":
		return TSequenceSet([s._mapTimestamps(fn) for s in self.__sequences])
