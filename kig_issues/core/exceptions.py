class StorageError(Exception):
    """The backing store failed to complete an operation."""


class CorruptRecordError(StorageError):
    """A stored record could not be decoded back into an entity."""

    def __init__(self, partition_key: str, row_key: str, field: str, reason: str):
        self.partition_key = partition_key
        self.row_key = row_key
        self.field = field
        super().__init__(
            f"Corrupt record {partition_key}/{row_key}: field '{field}' ({reason})"
        )


class DocumentExistsError(StorageError):
    """A conditional insert found the key already taken."""


class DuplicateEmailError(Exception):
    def __init__(self, email: str):
        self.email = email
        super().__init__(f"User already exists: {email}")


class ConfigurationError(RuntimeError):
    pass
