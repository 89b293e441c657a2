class TemporalError(Exception):
	"""The base class of every error raised by the temporal algebra."""
	pass


class ParseError(TemporalError, ValueError):
	"""
	A textual literal (span, span set, timestamp or temporal value) is malformed.
	A parse never succeeds partially.
	"""
	def __init__(self, text: str, reason: str = "") -> None:
		self.text = text
		self.reason = reason
		msg = f"Could not parse \"{text}\""
		if len(reason) > 0: msg = f"{msg}: {reason}"
		super().__init__(msg)
		return


class DomainError(TemporalError, ValueError):
	"""
	An argument lies outside of what the target domain can represent.
	For instance `lower > upper`, a non-positive width or a delta that overflows a date.
	"""
	pass
