from prometheus_client import Counter, Histogram, REGISTRY


# we check if they are already registered to avoid errors during hot reloads or test runs
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        return REGISTRY._names_to_collectors[name]


REQUESTS_TOTAL = get_or_create_metric(
    "calendar_requests_total",
    "Total requests",
    Counter,
    labelnames=["endpoint", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "calendar_request_latency_seconds",
    "Request latency",
    Histogram,
    labelnames=["endpoint"],
)

INTENTS_TOTAL = get_or_create_metric(
    "calendar_intents_total",
    "Classified natural-language intents",
    Counter,
    labelnames=["intent"],
)

EVENTS_CREATED_TOTAL = get_or_create_metric(
    "calendar_events_created_total",
    "Events created",
    Counter,
    labelnames=["source"],
)
