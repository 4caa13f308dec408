"""Stage timing for render calls."""

import time
from collections import defaultdict
from contextlib import contextmanager


class Profiler:
    """Collects wall-clock durations per named stage."""

    def __init__(self):
        self.timings = defaultdict(list)
        self.enabled = True

    @contextmanager
    def measure(self, name):
        """Context manager timing the enclosed block under ``name``.

        Usage:
            with profiler.measure('remap'):
                fan = remap_rect_sonar_image(ping, rect, cache)
        """
        if not self.enabled:
            yield
            return

        start = time.perf_counter()
        try:
            yield
        finally:
            self.timings[name].append(time.perf_counter() - start)

    def reset(self):
        self.timings.clear()

    def stats(self) -> list[dict]:
        """Per-stage totals, slowest first."""
        stats = []
        for name, times in self.timings.items():
            total = sum(times)
            stats.append({
                'name': name,
                'total': total,
                'count': len(times),
                'avg': total / len(times),
                'min': min(times),
                'max': max(times),
            })
        stats.sort(key=lambda s: s['total'], reverse=True)
        return stats

    def report(self) -> str:
        """Formatted table of stats()."""
        stats = self.stats()
        if not stats:
            return "No profiling data collected."

        total_time = sum(s['total'] for s in stats)
        lines = [
            "=" * 72,
            f"{'Stage':<20} {'Total(s)':>10} {'Calls':>8} {'Avg(ms)':>10} {'Max(ms)':>10} {'%':>6}",
            "-" * 72,
        ]
        for s in stats:
            pct = (s['total'] / total_time * 100) if total_time > 0 else 0
            lines.append(f"{s['name']:<20} "
                         f"{s['total']:>10.3f} "
                         f"{s['count']:>8} "
                         f"{s['avg']*1000:>10.2f} "
                         f"{s['max']*1000:>10.2f} "
                         f"{pct:>5.1f}%")
        lines.append("=" * 72)
        return "\n".join(lines)
