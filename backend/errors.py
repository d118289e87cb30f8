"""Failures raised by the stores before the evaluator is ever involved."""


class TrackerError(Exception):
    status_code = 400


class NotFound(TrackerError):
    """Referenced activity, rhythm, history event or errand does not exist."""

    status_code = 404


class MeasurementMismatch(TrackerError):
    """Completion logged against a duration activity, or minutes against an instances one."""

    status_code = 409


class InvariantViolation(TrackerError):
    """A task-framed activity must be measured in instances."""

    status_code = 422


class ValidationError(TrackerError):
    status_code = 400
