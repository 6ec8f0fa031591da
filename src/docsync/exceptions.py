"""Custom exceptions for docsync."""


class DocsyncError(Exception):
    """Base exception for docsync errors."""

    pass


class LockHeldError(DocsyncError):
    """Scope lock is already held by another run."""

    pass


class TrackingError(DocsyncError):
    """Tracking state exists but cannot be read or written."""

    pass


class GitError(DocsyncError):
    """A git command failed or returned unusable output."""

    pass


class UnreachableBaseError(GitError):
    """Last processed commit is unreachable and no fallback base resolved."""

    pass


class TemplateError(DocsyncError):
    """Prompt template missing or unreadable."""

    pass


class GeneratorError(DocsyncError):
    """External generator exited unsuccessfully."""

    pass


class GeneratorLaunchError(GeneratorError):
    """External generator process could not be started."""

    pass


class GeneratorRecursionError(GeneratorError):
    """Generator invoked from inside a generator invocation."""

    pass


class HookInputError(DocsyncError):
    """Hook payload is not valid JSON or misses required fields."""

    pass
