"""Built-in policies."""

from __future__ import annotations

from collections.abc import Mapping

from pkgmanagers.models import PolicyOperation, PolicyResult


class AllowAllPolicy:
    """Allows everything. Placeholder and test helper."""

    name = "allow-all"

    async def check(self, operation: PolicyOperation) -> PolicyResult:
        return PolicyResult(allowed=True)


class DenyAllPolicy:
    """Denies everything. Useful as a circuit breaker."""

    name = "deny-all"

    def __init__(self, reason: str = "") -> None:
        self.reason = reason or "all operations denied by policy"

    async def check(self, operation: PolicyOperation) -> PolicyResult:
        return PolicyResult(allowed=False, reason=self.reason)


class PackageBlocklistPolicy:
    """Denies operations naming a blocked package (name -> reason)."""

    name = "package-blocklist"

    def __init__(self, blocked: Mapping[str, str]) -> None:
        self.blocked = dict(blocked)

    async def check(self, operation: PolicyOperation) -> PolicyResult:
        for package in operation.packages:
            if package in self.blocked:
                return PolicyResult(
                    allowed=False,
                    reason=self.blocked[package],
                    metadata={"blocked_package": package},
                )
        return PolicyResult(allowed=True)
