"""Custom exceptions for tickline.

This module defines the exception hierarchy for handling invalid
timeline entities and malformed project or configuration documents.
"""


class TicklineError(Exception):
    """Base exception for tickline.

    All custom exceptions in this library inherit from this class,
    allowing callers to catch all tickline-related errors with a
    single except clause.
    """


class ValidationError(TicklineError, ValueError):
    """Invalid value for a timeline entity.

    Raised when a tempo, time signature or part is created or mutated
    with a value that would break the mapping math, for example a
    non-positive BPM or a denominator that is not a power of two.
    The entity keeps its previous value when this is raised.
    """


class ParseError(TicklineError):
    """Error reading a project or configuration document.

    Raised when a JSON document cannot be read, decoded, or
    converted into info records.
    """
