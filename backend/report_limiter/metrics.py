from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, generate_latest

REQUESTS_TOTAL = Counter(
    "requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)
REPORTS_TOTAL = Counter("reports_total", "Total URL reports by decision", ["outcome"])
EXPIRED_URLS_TOTAL = Counter("expired_urls_total", "URLs dropped by the TTL sweep")
WINDOW_RESETS_TOTAL = Counter("window_resets_total", "Bulk count resets performed")
TRACKED_URLS = Gauge("tracked_urls", "Number of URLs currently tracked")


__all__ = [
    "CONTENT_TYPE_LATEST",
    "REQUESTS_TOTAL",
    "REPORTS_TOTAL",
    "EXPIRED_URLS_TOTAL",
    "WINDOW_RESETS_TOTAL",
    "TRACKED_URLS",
    "generate_latest",
]
