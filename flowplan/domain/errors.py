"""Domain-level exceptions for the workflow execution engine."""


class RepositoryError(Exception):
    """Raised when workflow or prompt storage cannot be read or written."""

    pass
