"""
Prometheus metrics.
"""

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter('http_requests_total', 'Total HTTP requests', ['method', 'endpoint', 'status'])
REQUEST_DURATION = Histogram('http_request_duration_seconds', 'HTTP request duration')
ARTICLES_RENDERED = Counter('articles_rendered_total', 'Articles rendered in the browser')
RENDER_FAILURES = Counter('render_failures_total', 'Articles that failed to render')
AWARD_EVENTS = Counter('award_events_total', 'Award events extracted')
EVENTS_SAVED = Counter('events_saved_total', 'Award events reported saved by the sink')
