"""
The text format of temporal values.

	instant          value@timestamp
	discrete         {value@timestamp, ...}
	sequence         [value@timestamp, ...] with ( and ) for exclusive bounds
	sequence set     {[...], (...], ...}

A value may be prefixed with `Interp=Step;` and, for points, with `SRID=n;`.
"""
from typing import Any, Callable

from rt_temporal_commons.Shared.Errors import DomainError, ParseError
from rt_temporal_commons.Utils import Time
from rt_temporal_core.Temporal.Domains import PointDomain, ValueDomain
from rt_temporal_core.Temporal.Interpolation import TInterpolation
from rt_temporal_core.Temporal.Temporal import Temporal
from rt_temporal_core.Temporal.TInstant import TInstant
from rt_temporal_core.Temporal.TSequence import TSequence
from rt_temporal_core.Temporal.TSequenceSet import TSequenceSet


def splitTopLevel(text: str) -> list[str]:
	"""Split at the commas that are neither quoted nor nested in brackets or parentheses."""
	parts: list[str] = []
	depth = 0
	quoted = False
	escaped = False
	start = 0
	for (k, ch) in enumerate(text):
		if quoted:
			if escaped: escaped = False
			elif ch == "\\": escaped = True
			elif ch == "\"": quoted = False
			continue
		if ch == "\"": quoted = True
		elif ch in "[(": depth += 1
		elif ch in "])":
			depth -= 1
			if depth < 0: raise ParseError(text, "unbalanced brackets")
		elif ch == "," and depth == 0:
			parts.append(text[start:k])
			start = k + 1
	if quoted or depth != 0: raise ParseError(text, "unbalanced brackets or quotes")
	parts.append(text[start:])
	return [p.strip() for p in parts]

def __stripPrefixes(text: str, domain: ValueDomain) -> tuple[str, ValueDomain, TInterpolation | None]:
	body = text.strip()
	interpolation: TInterpolation | None = None
	while True:
		upper = body.upper()
		if upper.startswith("INTERP="):
			(prefix, _, body) = body.partition(";")
			interpolation = TInterpolation.fromText(prefix[7:])
		elif upper.startswith("SRID=") and isinstance(domain, PointDomain):
			(prefix, _, body) = body.partition(";")
			try:
				domain = PointDomain(int(prefix[5:]))
			except ValueError as e:
				raise ParseError(text, "invalid SRID") from e
		else:
			return (body.strip(), domain, interpolation)

def __parseInstant(text: str, domain: ValueDomain) -> TInstant:
	(value, at, timestamp) = text.rpartition("@")
	if len(at) == 0 or len(value.strip()) == 0: raise ParseError(text, "expected value@timestamp")
	return TInstant(domain.parse(value), Time.parseTimestamp(timestamp), domain)

def __parseSequence(text: str, domain: ValueDomain, interpolation: TInterpolation) -> TSequence:
	if len(text) < 2 or text[0] not in "[(" or text[-1] not in "])": raise ParseError(text, "expected a sequence between brackets")
	items = splitTopLevel(text[1:-1])
	if any(len(item) == 0 for item in items): raise ParseError(text, "empty instant")
	instants = [__parseInstant(item, domain) for item in items]
	return TSequence(instants, text[0] == "[", text[-1] == "]", interpolation)

def parseTemporal(text: str, domain: ValueDomain) -> Temporal:
	"""
	Parse the text of a temporal value of `domain`.

	Raises
	------
	ParseError
		When the text is malformed.
	DomainError
		When the text is well-formed but does not describe a valid value, for instance decreasing timestamps.
	"""
	(body, domain, interpolation) = __stripPrefixes(text, domain)
	if len(body) == 0: raise ParseError(text, "empty value")
	continuous = domain.defaultInterpolation if interpolation is None else interpolation
	if body[0] in "[(": return __parseSequence(body, domain, continuous)
	if body[0] == "{":
		if body[-1] != "}": raise ParseError(text, "expected a closing '}'")
		items = splitTopLevel(body[1:-1])
		if any(len(item) == 0 for item in items): raise ParseError(text, "empty item")
		if items[0][0] in "[(": return TSequenceSet([__parseSequence(item, domain, continuous) for item in items])
		return TSequence([__parseInstant(item, domain) for item in items], True, True, TInterpolation.DISCRETE)
	return __parseInstant(body, domain)

def __formatInstant(instant: TInstant, formatValue: Callable[[Any], str]) -> str:
	return f"{formatValue(instant.value)}@{Time.formatTimestamp(instant.timestamp)}"

def __formatSequence(sequence: Any, formatValue: Callable[[Any], str]) -> str:
	body = ", ".join([__formatInstant(i, formatValue) for i in sequence.instants()])
	if sequence.interpolation is TInterpolation.DISCRETE: return "{%s}" % body
	return "%s%s%s" % ("[" if sequence.lowerInc else "(", body, "]" if sequence.upperInc else ")")

def formatTemporal(temporal: Temporal, formatValue: Callable[[Any], str] | None = None, withSrid: bool = True) -> str:
	"""
	The text of a temporal value.

	:param formatValue: The text of a single value, by default the one of the domain.
	:param withSrid: Whether points in a spatial reference system carry the `SRID=n;` prefix.
	"""
	prefix = ""
	domain = temporal.domain
	if formatValue is None: formatValue = domain.format
	if withSrid and isinstance(domain, PointDomain) and domain.srid != 0: prefix += f"SRID={domain.srid};"
	if domain.CONTINUOUS and temporal.interpolation is TInterpolation.STEP: prefix += "Interp=Step;"
	if isinstance(temporal, TInstant): return prefix + __formatInstant(temporal, formatValue)
	if isinstance(temporal, TSequence): return prefix + __formatSequence(temporal, formatValue)
	if not isinstance(temporal, TSequenceSet): raise DomainError(f"Unknown temporal shape {type(temporal).__name__}.")
	return prefix + "{%s}" % ", ".join([__formatSequence(s, formatValue) for s in temporal.sequences()])
