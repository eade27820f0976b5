# noqa: D104 - package initialization
from .logging import configure_structured_logging  # noqa: F401
from .metrics import (  # noqa: F401
    metrics_blueprint,
    record_invalid_token,
    record_navigation,
    record_skill_failure,
    record_skill_request,
)
from .tracing import init_tracing  # noqa: F401
