from enum import Enum

from rt_temporal_commons.Shared.Errors import ParseError


class TInterpolation(Enum):
	"""How the value of a temporal value evolves between two recorded instants."""
	NONE = "None"
	"""A single instant."""
	DISCRETE = "Discrete"
	STEP = "Step"
	LINEAR = "Linear"

	@property
	def isContinuous(self) -> bool:
		return self is TInterpolation.STEP or self is TInterpolation.LINEAR

	@classmethod
	def fromText(cls, text: str) -> "TInterpolation":
		cleaned = text.strip().lower()
		for interp in cls:
			if interp.value.lower() == cleaned: return interp
		if cleaned == "stepwise": return TInterpolation.STEP
		raise ParseError(text, "unknown interpolation")
