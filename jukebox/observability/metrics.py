from __future__ import annotations

from flask import Blueprint, Response
from prometheus_client import Counter, generate_latest

metrics_blueprint = Blueprint("metrics_bp", __name__)

CONTENT_TYPE_LATEST = "text/plain; version=0.0.4; charset=utf-8"

# Operation label for requests that match no known route
UNSUPPORTED_OPERATION = "unsupported"

SKILL_REQUESTS = Counter(
    "jukebox_skill_requests_total",
    "Skill requests handled, by protocol and operation.",
    ["protocol", "operation"],
)
NAVIGATION_OUTCOMES = Counter(
    "jukebox_navigation_outcomes_total",
    "Adjacency lookups by direction and outcome.",
    ["direction", "outcome"],
)
INVALID_TOKENS = Counter(
    "jukebox_invalid_tokens_total",
    "Opaque ids or tokens that failed to decode.",
    ["kind"],
)
SKILL_FAILURES = Counter(
    "jukebox_skill_failures_total",
    "Unexpected exceptions converted to the conservative response.",
    ["protocol"],
)


def record_skill_request(protocol: str, operation: str) -> None:
    SKILL_REQUESTS.labels(protocol=protocol, operation=operation or "unknown").inc()


def record_navigation(direction: str, outcome: str) -> None:
    NAVIGATION_OUTCOMES.labels(direction=direction, outcome=outcome).inc()


def record_invalid_token(kind: str) -> None:
    INVALID_TOKENS.labels(kind=kind).inc()


def record_skill_failure(protocol: str) -> None:
    SKILL_FAILURES.labels(protocol=protocol).inc()


@metrics_blueprint.route("/metrics")
def metrics_endpoint() -> Response:
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
