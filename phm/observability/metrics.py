# phm/observability/metrics.py
from fastapi import APIRouter
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.responses import Response

router = APIRouter(tags=["observability"])

# ---------------------------
# Request metrics
# ---------------------------
REQUEST_COUNT = Counter(
    "phm_http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"],
)

REQUEST_LATENCY = Histogram(
    "phm_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# ---------------------------
# Business metrics
# ---------------------------
QUOTES_CREATED = Counter(
    "phm_quotes_created_total",
    "Quotes created (including duplicates)",
    ["source"],  # new|duplicate
)

QUOTE_STATUS_CHANGES = Counter(
    "phm_quote_status_changes_total",
    "Quote status changes",
    ["to_status"],
)

MEDIA_UPLOADS = Counter(
    "phm_media_uploads_total",
    "Media files uploaded",
    ["file_type"],  # photo|document
)

UPLOAD_SIZE = Histogram(
    "phm_media_upload_size_bytes",
    "Size of uploaded media files",
    buckets=(1e4, 1e5, 3e5, 1e6, 3e6, 1e7, 3e7),
)


def endpoint_label(request) -> str:
    # route template keeps label cardinality bounded ("/api/quotes/{quote_id}")
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


@router.get("/metrics", include_in_schema=True)
def metrics() -> Response:
    # Prometheus expects text/plain; version=0.0.4
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
