from collections import Counter


class ValidationMetrics:
    """Counts validations and failures for whoever owns the instance.

    Validators only write to a sink handed to them, so the lifetime of the
    counters belongs to the caller (a request, a batch job, a test).
    """

    def __init__(self):
        self._validations = Counter()
        self._errors = Counter()

    def record_validation(self, validator: str) -> None:
        self._validations[validator] += 1

    def record_error(self, validator: str, code: str) -> None:
        self._errors["{}:{}".format(validator, code)] += 1

    def snapshot(self) -> dict:
        return {
            "validations": dict(self._validations),
            "errors": dict(self._errors),
        }

    def reset(self) -> None:
        self._validations.clear()
        self._errors.clear()


__all__ = ["ValidationMetrics"]
