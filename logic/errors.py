"""
Travel computation errors.

All of these are local, recoverable conditions. The API layer turns them
into 400 responses; callers of the core are expected to show them to the
user rather than crash.
"""


class TravelError(ValueError):
    """Base class for travel computation errors."""


class InvalidSpeed(TravelError):
    """A travel speed of zero or less was supplied."""

    def __init__(self, speed, mode: str | None = None):
        self.speed = speed
        self.mode = mode
        if mode:
            message = f"Speed for '{mode}' must be positive, got {speed!r}"
        else:
            message = f"Speed must be positive, got {speed!r}"
        super().__init__(message)


class UnknownUnit(TravelError):
    """A distance unit outside the supported set was supplied."""

    def __init__(self, unit):
        self.unit = unit
        super().__init__(f"Unknown distance unit: {unit!r}")


class UnknownMode(TravelError):
    """A speed was set for a travel mode that is not configured."""

    def __init__(self, mode):
        self.mode = mode
        super().__init__(f"Unknown travel mode: {mode!r}")


class InvalidHoursPerDay(TravelError):
    """Travel hours per day below one."""

    def __init__(self, hours_per_day):
        self.hours_per_day = hours_per_day
        super().__init__(f"Hours per day must be at least 1, got {hours_per_day!r}")
