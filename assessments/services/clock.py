# assessments/services/clock.py
from django.utils import timezone


class SystemClock:
    """Wall clock in the deployment time zone, truncated to whole seconds."""

    def now(self):
        return timezone.localtime(timezone.now()).replace(microsecond=0)


class FixedClock:
    """A clock that only moves when told to."""

    def __init__(self, current):
        self.current = current.replace(microsecond=0)

    def now(self):
        return self.current

    def advance(self, delta):
        self.current = self.current + delta
        return self.current


system_clock = SystemClock()
