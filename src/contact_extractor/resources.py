"""System memory monitoring for long sequential batch runs."""

import psutil


class ResourceMonitor:
    """Detect memory pressure so a batch can recycle its headless browser.

    A browser that visits hundreds of sites in a row tends to grow; when
    the machine runs low the batch closes it and lets the next fetch start
    a fresh one.
    """

    def __init__(
        self,
        max_memory_percent: float = 85.0,
        min_free_memory_mb: int = 512,
    ) -> None:
        self.max_memory_percent = max_memory_percent
        self.min_free_memory_mb = min_free_memory_mb

    def under_pressure(self) -> bool:
        """Return True when memory use is above threshold or free memory is low."""
        mem = psutil.virtual_memory()
        if mem.percent >= self.max_memory_percent:
            return True
        return mem.available / (1024 * 1024) < self.min_free_memory_mb

    def get_snapshot(self) -> dict:
        """Return current resource snapshot for logging."""
        mem = psutil.virtual_memory()
        return {
            "memory_percent": mem.percent,
            "memory_available_mb": round(mem.available / (1024 * 1024)),
            "under_pressure": self.under_pressure(),
        }
