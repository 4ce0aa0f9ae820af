"""Error taxonomy shared by the auth core and the post service."""


class BlogError(Exception):
    """Base class for application errors."""

    code = "blog_error"

    def __init__(self, message: str = "", **context):
        super().__init__(message or self.code)
        self.context = context


class NotFoundError(BlogError):
    code = "not_found"


class ConflictError(BlogError):
    code = "conflict"


class ValidationError(BlogError):
    code = "validation_error"


class HashingError(BlogError):
    """Password hashing primitive failed or a stored hash is malformed."""

    code = "hashing_error"


class DatastoreError(BlogError):
    """Connection or query failure in the datastore."""

    code = "datastore_error"
