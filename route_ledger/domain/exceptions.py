"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class MalformedRecordError(DomainException):
    """Client record is missing a bucket or carries negative amounts/counts"""

    def __init__(self, message: str, client_id: str | None = None):
        super().__init__(message)
        self.client_id = client_id


class DataSourceError(DomainException):
    """Remote data source returned an error or is unavailable"""

    pass


class CacheReadError(DomainException):
    """Persistent cache store could not be read"""

    pass


class CacheWriteError(DomainException):
    """Persistent cache store could not be written"""

    pass
