"""Maps feed severities to a tri-state line status."""

from .models import Status

# Severities above this are a good service.
GOOD_SERVICE_ABOVE = 9
# Severities below this mean the line is not running.
NOT_RUNNING_BELOW = 5


def classify(severity: int) -> Status:
    """
    Classify a TfL status severity.

    Args:
        severity: Integer severity from the feed. Out-of-range values are
                  classified by the same thresholds, never clamped.

    Returns:
        Status.GOOD above 9, Status.NOT_RUNNING below 5, otherwise
        Status.DISRUPTED.
    """
    if severity > GOOD_SERVICE_ABOVE:
        return Status.GOOD
    if severity < NOT_RUNNING_BELOW:
        return Status.NOT_RUNNING
    return Status.DISRUPTED
