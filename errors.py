from __future__ import annotations


class PLCnextConfigError(RuntimeError):
    pass


class ConfigFileNotFoundError(PLCnextConfigError, FileNotFoundError):
    pass


class ConfigParseError(PLCnextConfigError, ValueError):
    pass


class DanglingReferenceError(PLCnextConfigError, LookupError):
    """A relation names a task or program that was never declared."""

    def __init__(self, kind: str, key: str, referenced_by: str = "") -> None:
        self.kind = kind
        self.key = key
        self.referenced_by = referenced_by
        msg = f"Dangling {kind} reference: '{key}'"
        if referenced_by:
            msg += f" (referenced by {referenced_by})"
        super().__init__(msg)
