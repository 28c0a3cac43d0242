"""Policy protocols -- checks that run before a command is executed."""

from __future__ import annotations

from typing import Protocol

from pkgmanagers.models import PolicyOperation, PolicyResult


class Policy(Protocol):
    """A named check that allows or denies an operation."""

    name: str

    async def check(self, operation: PolicyOperation) -> PolicyResult:
        """Evaluate the operation. Raising means the check itself failed."""
        ...


class PolicyHandler(Protocol):
    """Receives every policy verdict, e.g. for audit logging."""

    def on_policy_result(
        self, operation: PolicyOperation, policy: Policy, result: PolicyResult
    ) -> None: ...
