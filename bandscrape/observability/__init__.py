# noqa: D104 - package initialization
from .logging import configure_logging, configure_structured_logging  # noqa: F401
from .metrics import (  # noqa: F401
    metrics_blueprint,
    record_lookup,
    record_submission_accepted,
    record_submission_rejected,
)
