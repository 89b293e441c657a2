"""
Resolution of computed results into the shape they belong to.

Every operation that may produce a `TInstant`, a `TSequence` or a `TSequenceSet` computes a list of `Piece`
and hands it to `build()`, which inspects the number of instants and the contiguity of the pieces.
"""
from typing import Any, Callable, Iterable, cast

from rt_temporal_commons.Shared.Errors import DomainError
from rt_temporal_commons.Utils import Logging
from rt_temporal_core.Temporal.Domains import ValueDomain
from rt_temporal_core.Temporal.Interpolation import TInterpolation
from rt_temporal_core.Temporal.Temporal import Piece, Temporal
from rt_temporal_core.Temporal.TInstant import TInstant
from rt_temporal_core.Temporal.TSequence import TSequence, joinPieces
from rt_temporal_core.Temporal.TSequenceSet import TSequenceSet


def build(domain: ValueDomain, interpolation: TInterpolation, pieces: Iterable[Piece]) -> Temporal | None:
	"""
	Build the temporal value made of `pieces`.

	Returns
	-------
	Temporal | None
		`None` when there is no piece.
		A `TInstant` when a single instant is left.
		A discrete `TSequence` for several instants without continuous interpolation.
		A `TSequence` when the pieces join into one, a `TSequenceSet` otherwise.
	"""
	pieceList = [p for p in pieces if len(p.instants) > 0]
	if len(pieceList) == 0: return None
	if not interpolation.isContinuous:
		instants = __uniqueInstants(pieceList, domain)
		if len(instants) == 1: result: Temporal = instants[0]
		else: result = TSequence(instants, True, True, TInterpolation.DISCRETE)
	else:
		joined = joinPieces(pieceList, interpolation, domain)
		if len(joined) == 1 and len(joined[0].instants) == 1: result = joined[0].instants[0]
		elif len(joined) == 1: result = TSequence.fromPiece(joined[0], interpolation)
		else: result = TSequenceSet([TSequence.fromPiece(p, interpolation) for p in joined], normalize=False)
	Logging.Log(f"Resolved {len(pieceList)} pieces of {domain.NAME} into {type(result).__name__}.")
	return result

def buildDefined(domain: ValueDomain, interpolation: TInterpolation, pieces: Iterable[Piece]) -> Temporal:
	"""`build()` for operations that always keep at least one instant."""
	result = build(domain, interpolation, pieces)
	if result is None: raise DomainError(f"The {domain.NAME} value lost all of its instants.")
	return result

def __uniqueInstants(pieces: list[Piece], domain: ValueDomain) -> list[TInstant]:
	instants = sorted((i for p in pieces for i in p.instants), key=lambda i: i.timestamp)
	unique: list[TInstant] = []
	for instant in instants:
		if len(unique) > 0 and unique[-1].timestamp == instant.timestamp:
			if not domain.eq(unique[-1].value, instant.value): raise DomainError(f"Conflicting values at {instant.timestamp}.")
			continue
		unique.append(instant)
	return unique

def buildLike(temporal: Temporal, pieces: Iterable[Piece]) -> Temporal | None:
	"""Build a result with the interpolation of `temporal`."""
	return build(temporal.domain, temporal.interpolation, pieces)

def mapValues(temporal: Temporal, fn: Callable[[Any], Any]) -> Temporal:
	"""Apply `fn` to every value, keeping the timestamps and the shape."""
	if isinstance(temporal, TInstant): return temporal.withValue(fn(temporal.value))
	if isinstance(temporal, TSequence):
		instants = [i.withValue(fn(i.value)) for i in temporal.instants()]
		return TSequence(instants, temporal.lowerInc, temporal.upperInc, temporal.interpolation)
	if not isinstance(temporal, TSequenceSet): raise DomainError(f"Unknown temporal shape {type(temporal).__name__}.")
	return TSequenceSet([cast(TSequence, mapValues(s, fn)) for s in temporal.sequences()])

def setInterpolation(temporal: Temporal, interpolation: TInterpolation) -> Temporal:
	"""
	Change the interpolation of a value.

	Raises
	------
	DomainError
		When the value cannot be expressed with the requested interpolation,
		for instance a non-constant linear value turned into a step one.
	"""
	current = temporal.interpolation
	domain = temporal.domain
	if interpolation is current: return temporal
	if not domain.supports(interpolation): raise DomainError(f"{domain.NAME} does not support {interpolation.value} interpolation.")
	if interpolation is TInterpolation.NONE: return temporal.toInstant()
	if interpolation is TInterpolation.DISCRETE:
		pieces = temporal.pieces()
		if any(len(p.instants) > 1 for p in pieces): raise DomainError("Only instantaneous values can become discrete.")
		instants = [p.instants[0] for p in pieces]
		return TSequence(instants, True, True, TInterpolation.DISCRETE)
	if not current.isContinuous:
		return TSequence(temporal.instants(), True, True, interpolation)
	if interpolation is TInterpolation.STEP:
		for piece in temporal.pieces():
			if any(not domain.eq(i.value, piece.instants[0].value) for i in piece.instants):
				raise DomainError("Only constant segments can become step segments.")
		result = buildDefined(domain, interpolation, temporal.pieces())
		return result
	pieces: list[Piece] = []
	for piece in temporal.pieces(): pieces.extend(__stepToLinear(piece, domain))
	result = buildDefined(domain, interpolation, pieces)
	return result

def __stepToLinear(piece: Piece, domain: ValueDomain) -> list[Piece]:
	"""Split a step piece at every jump, each part holding its value until the jump."""
	result: list[Piece] = []
	current: list[TInstant] = [piece.instants[0]]
	lowerInc = piece.lowerInc
	for instant in piece.instants[1:]:
		if domain.eq(current[-1].value, instant.value):
			current.append(instant)
			continue
		current.append(TInstant(current[-1].value, instant.timestamp, domain))
		result.append(Piece(tuple(current), lowerInc, False))
		current = [instant]
		lowerInc = True
	result.append(Piece(tuple(current), lowerInc, piece.upperInc))
	return result

def toSequence(temporal: Temporal, interpolation: TInterpolation | None = None) -> TSequence:
	if interpolation is None:
		interpolation = temporal.interpolation if temporal.interpolation.isContinuous else temporal.domain.defaultInterpolation
	if isinstance(temporal, TInstant): return TSequence([temporal], True, True, interpolation)
	if isinstance(temporal, TSequenceSet):
		if temporal.numSequences() != 1: raise DomainError(f"A set of {temporal.numSequences()} sequences is not a sequence.")
		temporal = temporal.startSequence()
	converted = setInterpolation(temporal, interpolation)
	if isinstance(converted, TInstant): return TSequence([converted], True, True, interpolation)
	if not isinstance(converted, TSequence): raise DomainError(f"The value is not a single sequence once {interpolation.value}.")
	return converted

def toSequenceSet(temporal: Temporal, interpolation: TInterpolation | None = None) -> TSequenceSet:
	if interpolation is None:
		interpolation = temporal.interpolation if temporal.interpolation.isContinuous else temporal.domain.defaultInterpolation
	if not interpolation.isContinuous: raise DomainError("A sequence set is made of continuous sequences.")
	if isinstance(temporal, TSequenceSet) and temporal.interpolation is interpolation: return temporal
	if not temporal.interpolation.isContinuous:
		return TSequenceSet([TSequence([i], True, True, interpolation) for i in temporal.instants()])
	converted = setInterpolation(temporal, interpolation)
	if isinstance(converted, TSequenceSet): return converted
	return TSequenceSet([toSequence(converted, interpolation)])
