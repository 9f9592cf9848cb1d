"""
Every exception that may reach a caller of paperclip is a subclass of
PaperclipException. Errors from the standard library or from Pillow are
wrapped at the point where they occur, with the original exception chained.
"""


class PaperclipException(Exception):
    """
    Base class for all exceptions thrown by paperclip.
    """

    def __init__(self, message=None):
        super().__init__(message)


class InvalidArgumentError(PaperclipException, ValueError):
    """
    A caller-supplied argument is missing, empty or of the wrong type.
    """


class EncodingError(PaperclipException):
    """
    The image could not be encoded.
    """


class BoundaryCollisionError(PaperclipException):
    """
    The multipart boundary occurs within the content it is supposed to delimit.
    """


class OptionsError(PaperclipException):
    pass
