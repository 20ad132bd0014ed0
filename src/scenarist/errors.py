"""Scenarist exception types."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from scenarist.models import ScenarioStep


class ScenaristError(Exception):
    """Base class for all Scenarist errors."""

    pass


class TabularSourceError(ScenaristError):
    """Raised when a scenario or mapping file cannot be read."""

    pass


class EmptySourceError(ScenaristError):
    """Raised when a scenario or mapping file has no data rows."""

    def __init__(self, message: str = "File is empty.") -> None:
        super().__init__(message)


class ValidationFailedError(ScenaristError):
    """Raised when one or more rows break the required-field contract.

    Carries every violation, not just the first one. ``str(error)`` is the
    messages joined by newlines.
    """

    def __init__(self, messages: list[str]) -> None:
        self.messages = list(messages)
        super().__init__("\n".join(self.messages))


class ElementNotFoundError(ScenaristError):
    """Raised when an element lookup by selector matches nothing."""

    def __init__(self, selector: str) -> None:
        self.selector = selector
        super().__init__(f'failed to find element matching selector "{selector}"')


class ActionFailedError(ScenaristError):
    """Raised when a scenario step fails; the remaining steps are not run."""

    def __init__(self, index: int, step: ScenarioStep, cause: BaseException) -> None:
        self.index = index
        self.step = step
        self.cause = cause
        super().__init__(f"Step {index} ({step.kind.value} {step.selector!r}) failed: {cause}")
