"""Generator invocation with recursion protection.

The generator (the `claude` CLI by default) edits documentation files itself.
docsync only launches it, either detached in the background or synchronously,
and always with an argv list so prompt text never passes through a shell.

Every child is started with the guard variable set (CLAUDE_HOOK_INTERNAL=1).
Hooks fired by the generator's own edits see the guard in their environment,
build an InvocationContext with inside_generator=True, and launch nothing.

Public API (Studs):
    InvocationContext - Recursion guard state, built at the process boundary
    GeneratorInvoker - Background submit and synchronous run
    GeneratorResult - Outcome of a synchronous run
"""

import logging
import os
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from docsync.exceptions import GeneratorError, GeneratorLaunchError, GeneratorRecursionError
from docsync.subprocess_helper import COMMAND_NOT_FOUND, safe_run

logger = logging.getLogger(__name__)

DEFAULT_GENERATOR = "claude"
DEFAULT_GUARD_ENV_VAR = "CLAUDE_HOOK_INTERNAL"


@dataclass(frozen=True)
class InvocationContext:
    """Whether this process already runs inside a generator invocation."""

    inside_generator: bool = False

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str] | None = None,
        guard_env_var: str = DEFAULT_GUARD_ENV_VAR,
    ) -> "InvocationContext":
        env = os.environ if environ is None else environ
        return cls(inside_generator=env.get(guard_env_var) == "1")


@dataclass
class GeneratorResult:
    """Outcome of a synchronous generator run."""

    returncode: int
    stdout: str
    stderr: str


class GeneratorInvoker:
    """Launch the documentation generator.

    Example:
        >>> invoker = GeneratorInvoker("claude", InvocationContext.from_environ())
        >>> pid = invoker.submit("Update the index.md file at ...", "haiku", Path("."))
    """

    def __init__(
        self,
        command: str = DEFAULT_GENERATOR,
        context: InvocationContext | None = None,
        guard_env_var: str = DEFAULT_GUARD_ENV_VAR,
    ):
        self.command = command
        self.context = context or InvocationContext()
        self.guard_env_var = guard_env_var

    def build_argv(self, prompt: str, model: str | None = None) -> list[str]:
        argv = [self.command, "-p", prompt]
        if model:
            argv.extend(["--model", model])
        return argv

    def child_env(self) -> dict[str, str]:
        env = os.environ.copy()
        env[self.guard_env_var] = "1"
        return env

    def submit(self, prompt: str, model: str | None, cwd: Path) -> int | None:
        """Start the generator detached and return its pid.

        Returns None without launching when already inside a generator.

        Raises:
            GeneratorLaunchError: If the process cannot be started
        """
        if self.context.inside_generator:
            logger.info("Recursion guard active, not launching generator")
            return None

        try:
            process = subprocess.Popen(
                self.build_argv(prompt, model),
                cwd=str(cwd),
                env=self.child_env(),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,  # Survive the hook process exiting
                close_fds=True,
            )
        except OSError as e:
            raise GeneratorLaunchError(f"Failed to start {self.command}: {e}") from e

        logger.info(f"Generator started in background (PID: {process.pid})")
        return process.pid

    def run(self, prompt: str, model: str | None, cwd: Path) -> GeneratorResult:
        """Run the generator to completion.

        Raises:
            GeneratorRecursionError: If already inside a generator
            GeneratorLaunchError: If the command is not installed
            GeneratorError: If the generator exits non-zero
        """
        if self.context.inside_generator:
            raise GeneratorRecursionError(
                f"{self.guard_env_var}=1: refusing to run the generator from inside itself"
            )

        result = safe_run(
            self.build_argv(prompt, model),
            cwd=cwd,
            timeout=None,
            env=self.child_env(),
        )
        if result.returncode == COMMAND_NOT_FOUND and not result.stdout:
            raise GeneratorLaunchError(f"Generator command not found: {self.command}")
        if not result.ok:
            detail = result.stderr.strip() or f"exit code {result.returncode}"
            raise GeneratorError(f"{self.command} failed: {detail}")

        return GeneratorResult(result.returncode, result.stdout, result.stderr)


__all__ = [
    "DEFAULT_GENERATOR",
    "DEFAULT_GUARD_ENV_VAR",
    "GeneratorInvoker",
    "GeneratorResult",
    "InvocationContext",
]
