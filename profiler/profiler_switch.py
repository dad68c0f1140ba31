# profiler_switch.py

class ProfilingSwitch:
    def __init__(self, enabled: bool = True):
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    def configure(self, enabled: bool) -> None:
        self._enabled = bool(enabled)

# Singleton instance
profiling_switch = ProfilingSwitch()
