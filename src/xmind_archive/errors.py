"""Error taxonomy for archive operations."""


class XMindError(Exception):
    """Base class for all archive operation failures."""


class AccessDeniedError(XMindError):
    """A path lies outside every allowed directory."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Access denied - {path} is not in an allowed directory")
        self.path = path


class NotFoundError(XMindError):
    """A file, sheet, or node does not exist."""


class FormatError(XMindError):
    """An archive cannot be opened or its content cannot be parsed."""


class UnresolvedReferenceError(XMindError):
    """A title-based reference does not name any built topic."""

    def __init__(self, kind: str, target: str) -> None:
        super().__init__(f'{kind} not found: "{target}"')
        self.kind = kind
        self.target = target


class OutputPathError(XMindError):
    """The output path of a build is not acceptable."""
