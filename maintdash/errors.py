from __future__ import annotations


class MaintDashError(ValueError):
    """Base error for input the engine refuses to work with."""


class InvalidPeriod(MaintDashError):
    """A custom period filter without a usable start/end bound."""


class ConfigError(MaintDashError):
    pass
