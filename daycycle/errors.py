from __future__ import annotations


class DaycycleError(Exception):
    pass


class MalformedFixedTime(DaycycleError, ValueError):
    """A clock time string that does not parse as HH:MM or HH:MM:SS."""


class UnresolvableTimeSpec(DaycycleError):
    """No second-of-day can be produced for a spec today (e.g. polar night)."""


class EmptySchedule(DaycycleError):
    """No usable entries are left for the current cycle."""


class CallbackFailure(DaycycleError):
    pass
