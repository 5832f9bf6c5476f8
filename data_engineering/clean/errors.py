"""
Exceptions raised while loading and normalizing KSI collision records

MissingFieldError and ParseError are per-record: the normalizer counts them
and drops the record. SourceUnavailableError is fatal for the whole run.
"""


class CollisionDataError(Exception):
    """Base class for collision pipeline errors"""


class MissingFieldError(CollisionDataError):
    """A required raw field is absent or blank"""

    def __init__(self, field):
        self.field = field
        super().__init__(f'Missing required field: {field}')


class ParseError(CollisionDataError, ValueError):
    """A date/time field is present but does not match the expected grammar"""

    def __init__(self, field, value):
        self.field = field
        self.value = value
        super().__init__(f'Could not parse {field}: {value!r}')


class SourceUnavailableError(CollisionDataError):
    """The raw collision table cannot be obtained or read"""

    def __init__(self, source, reason):
        self.source = str(source)
        self.reason = reason
        super().__init__(f'Source unavailable ({self.source}): {reason}')
