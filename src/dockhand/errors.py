"""Error types raised by dockhand."""

from typing import Optional


class DockhandError(Exception):
    """Base class for dockhand errors."""
    pass


class UnresolvableInput(DockhandError):
    """No source produced a valid value and no interactive channel could help."""

    def __init__(self, name: str, override: Optional[str] = None, reason: Optional[str] = None):
        self.name = name
        self.override = override
        self.reason = reason
        message = f"Could not resolve '{name}'"
        if reason:
            message += f": {reason}"
        if override:
            message += f". Supply it non-interactively via {override}"
        super().__init__(message)


class InvalidDocument(DockhandError):
    """Configuration document is present but not a parsable JSON object."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path} is not a valid JSON object: {reason}")


class ResourceReconcileError(DockhandError):
    """A single resource failed to converge."""

    def __init__(self, kind: str, name: str, reason: str):
        self.kind = kind
        self.name = name
        self.reason = reason
        super().__init__(f"{kind} '{name}' failed to converge: {reason}")


class CommandError(DockhandError):
    """An external command exited unsuccessfully."""

    def __init__(self, message: str, stderr: str = ""):
        self.stderr = stderr.strip()
        if self.stderr:
            message = f"{message}: {self.stderr}"
        super().__init__(message)


class InstallError(CommandError):
    """Package installation failed."""
    pass


class RunError(CommandError):
    """The container engine rejected an operation."""
    pass


class PreconditionError(DockhandError):
    """The host is not in a state the workflow can start from."""
    pass
