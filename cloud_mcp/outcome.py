"""ToolOutcome - the tagged result every handler returns to the dispatcher."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class OutcomeKind(str, Enum):
    OK = "ok"
    PARAMETER = "parameter"
    ACCOUNT = "account"
    UPSTREAM = "upstream"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ToolOutcome:
    """Result of one tool invocation.

    ``text`` is the response body for OK outcomes and the error message
    otherwise. ``cause`` is only set for upstream and internal failures.
    """

    kind: OutcomeKind
    text: str
    qualifier: str = ""
    cause: BaseException | str | None = None

    @classmethod
    def ok(cls, text: str) -> ToolOutcome:
        return cls(OutcomeKind.OK, text)

    @classmethod
    def parameter(cls, qualifier: str, message: str) -> ToolOutcome:
        return cls(OutcomeKind.PARAMETER, message, qualifier)

    @classmethod
    def account(cls, qualifier: str, message: str) -> ToolOutcome:
        return cls(OutcomeKind.ACCOUNT, message, qualifier)

    @classmethod
    def upstream(
        cls, qualifier: str, message: str, cause: BaseException | str | None = None
    ) -> ToolOutcome:
        return cls(OutcomeKind.UPSTREAM, message, qualifier, cause)

    @classmethod
    def internal(
        cls, qualifier: str, message: str, cause: BaseException | str | None = None
    ) -> ToolOutcome:
        return cls(OutcomeKind.INTERNAL, message, qualifier, cause)

    @property
    def is_ok(self) -> bool:
        return self.kind is OutcomeKind.OK

    @property
    def category(self) -> str:
        return self.kind.value
