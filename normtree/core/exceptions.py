class NormalizeError(Exception):
    """
    Base exception for all normalization failures.
    """

    pass


class InvalidInputError(NormalizeError):
    """
    Raised when normalize() receives data that is neither a mapping nor a sequence.
    """

    pass


class InvalidSchemaError(NormalizeError):
    """
    Raised when normalize() receives a schema it cannot traverse with.
    """

    pass


class SchemaDefinitionError(NormalizeError):
    """
    Raised when a schema descriptor or schema document is misconfigured.
    """

    pass
