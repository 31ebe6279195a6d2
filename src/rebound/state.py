from dataclasses import dataclass


@dataclass
class RetryState:
    attempt: int = 0  # retries scheduled so far
    total_delay: float = 0.0
    last_error: BaseException | None = None

    def record(self, error: BaseException, delay: float) -> None:
        self.last_error = error
        self.total_delay += delay
        self.attempt += 1
