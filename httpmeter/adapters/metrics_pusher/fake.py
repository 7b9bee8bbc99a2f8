"""Fake MetricsPusher for testing."""


class FakeMetricsPusher:
    """In-memory spy implementing the MetricsPusher protocol.

    Set ``fail_with`` to make every push raise, e.g. to exercise the retry
    behaviour of the periodic driver.
    """

    def __init__(self, fail_with: Exception | None = None) -> None:
        self.fail_with = fail_with
        self.push_count: int = 0
        self.failed_count: int = 0

    def push(self) -> None:
        if self.fail_with is not None:
            self.failed_count += 1
            raise self.fail_with
        self.push_count += 1
