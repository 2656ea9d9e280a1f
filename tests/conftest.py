from __future__ import annotations

import json
from typing import Callable, List, Optional, Tuple

import pytest  # type: ignore[import]

from code_roaster.models import Completion, ConnectionResult
from code_roaster.review import BaseReviewAgent


REVIEW_JSON = json.dumps(
    {
        "score": 78,
        "summary": {"totalIssues": 2, "critical": 0, "warning": 1, "info": 1},
        "suggestions": [
            {"id": "s1", "type": "style", "severity": "low", "line": 3, "title": "Naming", "suggestion": "Rename"},
        ],
    }
)


class DummyAgent(BaseReviewAgent):
    def __init__(
        self,
        content: str = REVIEW_JSON,
        *,
        connected: bool = True,
        error: Optional[Exception] = None,
    ) -> None:
        self.content = content
        self.connected = connected
        self.error = error
        self.calls: List[Tuple[str, str]] = []
        self.pings = 0

    def check_connection(self) -> ConnectionResult:  # noqa: D401 - simple stub
        self.pings += 1
        return ConnectionResult(success=self.connected, message="ok" if self.connected else "down")

    def complete(self, system_prompt: str, user_prompt: str) -> Completion:  # noqa: D401 - simple stub
        self.calls.append((system_prompt, user_prompt))
        if self.error is not None:
            raise self.error
        return Completion(content=self.content, tokens_used=120)


@pytest.fixture()
def make_agent() -> Callable[..., DummyAgent]:
    return DummyAgent
