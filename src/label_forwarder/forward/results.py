"""Per-thread outcomes and the batch report of a forwarding run"""
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class ThreadResult:
    thread_id: str
    subject: str
    forwarded: int = 0
    error: Optional[str] = None

    @property
    def ok(self):
        return self.error is None


@dataclass
class BatchReport:
    label_name: str
    label_found: bool = True
    results: List[ThreadResult] = field(default_factory=list)

    def add(self, result):
        self.results.append(result)

    @property
    def attempted(self):
        return len(self.results)

    @property
    def succeeded(self):
        return sum(1 for result in self.results if result.ok)

    @property
    def failed(self):
        return self.attempted - self.succeeded

    @property
    def messages_forwarded(self):
        return sum(result.forwarded for result in self.results)

    @property
    def failures(self):
        return [result for result in self.results if not result.ok]

    def summary(self):
        if not self.label_found:
            return f"Label '{self.label_name}' not found; nothing processed"
        return (
            f"Processed {self.attempted} threads from '{self.label_name}': "
            f"{self.succeeded} succeeded, {self.failed} failed, "
            f"{self.messages_forwarded} messages forwarded"
        )
