"""Test configuration and fixtures."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest
from hypothesis import settings

from rt_temporal_commons import Runtime
from rt_temporal_commons.Shared.Settings import Settings

settings.register_profile("rt_temporal", deadline=None, max_examples=60)
settings.load_profile("rt_temporal")

T0 = datetime(2020, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(scope="session", autouse=True)
def engine():
	"""An engine running in UTC with verbose logging, shared by the whole session."""
	Runtime.Engine().reconfigure(Settings(timezone="UTC", logSeverity=logging.DEBUG))
	yield Runtime.Engine()
	Runtime.Finalize()
	return

@pytest.fixture
def at() -> Callable[[float], datetime]:
	"""The timestamp that many minutes after 2020-01-01 00:00 UTC."""
	return lambda minutes: T0 + timedelta(minutes=minutes)
