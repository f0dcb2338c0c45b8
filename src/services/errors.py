"""Error taxonomy for vault operations.

Every failure an operation can report is a VaultError subclass carrying a
``kind`` (stable machine-readable name), a human message with a short
troubleshooting hint, and JSON-safe ``details``. The tool layer turns these
into ``err()`` envelopes; nothing here is allowed to escape a tool call.
"""


class VaultError(Exception):
    kind = "OperationFailed"

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message, **self.details}


class InvalidPathError(VaultError):
    kind = "InvalidPath"

    def __init__(self, path, reason: str):
        super().__init__(
            f"Invalid path '{path}': {reason}. "
            "Use a vault-relative path like 'folder/note.md' without leading slashes or '..'.",
            path=path,
            reason=reason,
        )


class InvalidArgumentError(VaultError):
    kind = "InvalidArgument"

    def __init__(self, message: str, **details):
        super().__init__(message, **details)


class NotFoundError(VaultError):
    kind = "NotFound"

    def __init__(self, path: str, what: str = "File"):
        super().__init__(
            f"{what} not found: {path}. "
            "Check the spelling and case, or use list_notes to browse the folder.",
            path=path,
        )


class NotAFileError(VaultError):
    kind = "NotAFile"

    def __init__(self, path: str):
        super().__init__(
            f"Not a file: {path}. The path points to a folder; "
            "use list_notes to see its contents.",
            path=path,
        )


class NotAFolderError(VaultError):
    kind = "NotAFolder"

    def __init__(self, path: str):
        super().__init__(
            f"Not a folder: {path}. The path points to a file.",
            path=path,
        )


class AlreadyExistsError(VaultError):
    kind = "AlreadyExists"

    def __init__(self, path: str):
        super().__init__(
            f"File already exists: {path}. "
            "Pass on_conflict='overwrite' to replace it or on_conflict='rename' "
            "to create a numbered copy.",
            path=path,
        )


class ParentNotFoundError(VaultError):
    kind = "ParentNotFound"

    def __init__(self, path: str, parent: str):
        super().__init__(
            f"Parent folder does not exist: {parent}. "
            f"Pass create_parents=true to create it along with {path}.",
            path=path,
            parent=parent,
        )


class VersionMismatchError(VaultError):
    kind = "VersionMismatch"

    def __init__(self, path: str, provided: str, current: str):
        super().__init__(
            f"Version mismatch for {path}: expected {provided}, current is {current}. "
            "The note changed since it was read; read it again and retry.",
            path=path,
            provided_version=provided,
            current_version=current,
        )


class WaypointProtectedError(VaultError):
    kind = "WaypointProtected"

    def __init__(self, path: str, waypoint_range: dict):
        super().__init__(
            f"Edit would modify the waypoint block in {path} "
            f"(lines {waypoint_range['start']}-{waypoint_range['end']}). "
            "Waypoint blocks are generated automatically; keep the block intact "
            "and edit around it.",
            path=path,
            waypoint_range=waypoint_range,
        )


class InvalidRangeError(VaultError):
    kind = "InvalidRange"

    def __init__(self, message: str, edit: dict, total_lines: int):
        super().__init__(message, edit=edit, total_lines=total_lines)


class NoOperationsProvidedError(VaultError):
    kind = "NoOperationsProvided"

    def __init__(self, message: str):
        super().__init__(message)


class OperationFailedError(VaultError):
    kind = "OperationFailed"

    def __init__(self, operation: str, path: str, message: str):
        super().__init__(
            f"Failed to {operation} {path}: {message}",
            operation=operation,
            path=path,
        )
