import logging
from functools import partial
from typing import Callable

NAMESPACE = "rt_temporal"
__LOGGER: logging.Logger | None = None
logging.basicConfig(format="[+][%(levelname)s]: %(message)s")
__rtTemporalLog: Callable[[str], None] = partial(logging.getLogger(NAMESPACE).log, logging.DEBUG)


def SetLogger(logger: logging.Logger, defaultSeverity: int = logging.DEBUG) -> None:
	"""
	Install the logger used by the whole package.

	Parameters
	----------
	logger : logging.Logger
		The logger object that receives every message.
	defaultSeverity : int
		The severity used by `Log()`.
	"""
	global __LOGGER
	global __rtTemporalLog
	__LOGGER = logger
	__rtTemporalLog = partial(__LOGGER.log, defaultSeverity)
	return

def Logger() -> logging.Logger:
	"""
	The logger object.

	:return: The logger installed by `SetLogger()`.
	In case no logger has been installed, the package logger named `rt_temporal` is used,
	which most likely will log to std stream.
	:rtype: `logging.Logger`
	"""
	global __LOGGER
	if __LOGGER is None: return logging.getLogger(NAMESPACE)
	return __LOGGER

def Log(msg: str) -> None:
	global __rtTemporalLog
	__rtTemporalLog(msg)
	return
