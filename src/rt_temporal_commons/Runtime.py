import atexit
from typing import cast

from rt_temporal_commons.Shared.Settings import Settings
from rt_temporal_commons.Utils import Logging
from rt_temporal_commons.Utils.Python import Singleton


class Engine(metaclass=Singleton):
	"""
	The process-wide state of the temporal engine.

	`initialize()` must happen once before values are built and `finalize()` once at exit.
	Reading `settings` before anybody initialized the engine initializes it with the defaults.
	"""
	def __init__(self) -> None:
		self.__settings: Settings | None = None
		self.__finalized: bool = False
		return

	def __repr__(self) -> str:
		state = "finalized" if self.__finalized else ("ready" if self.isInitialized else "idle")
		return f"Engine[{state}]"

	@property
	def isInitialized(self) -> bool:
		return self.__settings is not None

	@property
	def settings(self) -> Settings:
		if self.__settings is None: self.initialize()
		return cast(Settings, self.__settings)

	def initialize(self, settings: Settings | None = None) -> None:
		if self.__settings is not None:
			Logging.Log(f"{repr(self)} is already initialized. Ignoring the new settings.")
			return
		self.__settings = Settings() if settings is None else settings
		self.__finalized = False
		Logging.Logger().setLevel(self.__settings.logSeverity)
		atexit.register(self.finalize)
		Logging.Log(f"{repr(self)} initialized with {self.__settings}.")
		return

	def finalize(self) -> None:
		if self.__finalized or self.__settings is None: return
		self.__finalized = True
		Logging.Log(f"{repr(self)} finalized.")
		self.__settings = None
		return

	def reconfigure(self, settings: Settings) -> None:
		"""Swap the settings of an initialized engine. Meant for tests and interactive sessions."""
		if self.__settings is None:
			self.initialize(settings)
			return
		self.__settings = settings
		Logging.Logger().setLevel(settings.logSeverity)
		Logging.Log(f"{repr(self)} reconfigured with {settings}.")
		return


def Initialize(settings: Settings | None = None) -> None:
	Engine().initialize(settings)
	return

def Finalize() -> None:
	Engine().finalize()
	return

def CurrentSettings() -> Settings:
	return Engine().settings
