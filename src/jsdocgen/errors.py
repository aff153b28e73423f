from typing import Optional


class JsdocError(Exception):
    """
    Base class for failures raised while generating a documentation block.
    """

    def __init__(self, message: str, *, line: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line

    @property
    def reason(self) -> str:
        return type(self).__name__


class NotADeclaration(JsdocError):
    """
    No recognizable declaration starts within the lookahead window.
    """


class UnbalancedSyntax(JsdocError):
    """
    Brackets of a declaration never balance; the source is malformed.
    """


class NoActiveTarget(JsdocError):
    """
    The host supplied no document to work on.
    """
