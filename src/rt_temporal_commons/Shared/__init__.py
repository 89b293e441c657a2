"""Value objects shared by every package of the project."""
from rt_temporal_commons.Shared.Errors import DomainError, ParseError, TemporalError
from rt_temporal_commons.Shared.Settings import Settings
