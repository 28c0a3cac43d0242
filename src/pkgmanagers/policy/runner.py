"""Runner decorator that consults policies before executing anything."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pkgmanagers.errors import PolicyCheckError, PolicyViolationError
from pkgmanagers.models import PolicyMode, PolicyOperation, Result
from pkgmanagers.policy.base import Policy, PolicyHandler
from pkgmanagers.runner.base import Runner

logger = logging.getLogger(__name__)


class PolicyRunner:
    """Wraps a Runner; every command passes the policy list first.

    Modes:
        ENFORCE: the first deny raises PolicyViolationError; nothing runs.
        WARN: every policy is consulted, denials are logged, the command runs.
        DISABLED: straight passthrough, no policy is consulted.
    """

    def __init__(
        self,
        inner: Runner,
        policies: Iterable[Policy] = (),
        mode: PolicyMode = PolicyMode.ENFORCE,
        handler: PolicyHandler | None = None,
    ) -> None:
        self.inner = inner
        self.policies: list[Policy] = list(policies)
        self.mode = mode
        self.handler = handler

    def add_policy(self, policy: Policy) -> None:
        self.policies.append(policy)

    async def run(self, directory: str, args: list[str]) -> Result:
        """Check and run a bare argument vector.

        Only the binary and the first subcommand are known here, so they
        stand in for manager and operation.
        """
        operation = PolicyOperation(
            command=list(args),
            manager=args[0] if args else "",
            operation=args[1] if len(args) > 1 else "",
            working_dir=directory,
        )
        return await self.run_operation(operation)

    async def run_operation(self, operation: PolicyOperation) -> Result:
        """Check and run an operation that carries full request context."""
        if self.mode != PolicyMode.DISABLED:
            await self._check(operation)
        return await self.inner.run(operation.working_dir, operation.command)

    async def _check(self, operation: PolicyOperation) -> None:
        for policy in self.policies:
            try:
                result = await policy.check(operation)
            except Exception as exc:
                raise PolicyCheckError(policy.name, exc) from exc

            if self.handler is not None:
                self.handler.on_policy_result(operation, policy, result)
            for warning in result.warnings:
                logger.warning("Policy %s: %s", policy.name, warning)

            if result.allowed:
                continue
            if self.mode == PolicyMode.ENFORCE:
                raise PolicyViolationError(policy.name, result.reason, operation.command)
            logger.warning(
                "Policy %s would deny `%s`: %s",
                policy.name,
                " ".join(operation.command),
                result.reason,
            )
