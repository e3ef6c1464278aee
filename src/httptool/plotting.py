import logging

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from .profiler import ProfileReport  # noqa: E402

logger = logging.getLogger(__name__)


def plot_latencies(report: ProfileReport, path: str) -> bool:
    """Save sorted per-request latencies with mean/median markers as a PNG."""
    times = report.response_times_ms
    if not times:
        logger.warning("No successful requests, skipping plot %s", path)
        return False

    ranks = list(range(1, len(times) + 1))
    fig = plt.figure(figsize=(10, 6))
    plt.plot(ranks, times, marker='o', linewidth=2, markersize=4, label='Response time')
    plt.axhline(report.mean_ms, color='tab:orange', linestyle='--', label=f'Mean ({report.mean_ms:.1f} ms)')
    plt.axhline(report.median_ms, color='tab:green', linestyle=':', label=f'Median ({report.median_ms} ms)')
    plt.xlabel('Request (sorted by latency)', fontsize=12)
    plt.ylabel('Response time (ms)', fontsize=12)
    plt.title(f'{report.url}\n{report.success_count}/{report.request_count} successful', fontsize=14)
    plt.grid(True, alpha=0.3)
    plt.legend(loc='upper left', fontsize=10)
    plt.tight_layout()
    try:
        plt.savefig(path, dpi=150)
    except OSError as e:
        logger.warning("Could not save latency plot to %s: %s", path, e)
        return False
    finally:
        plt.close(fig)
    logger.info("Latency plot saved to %s", path)
    return True
