class DocStoreError(Exception):
    """Base class for every error the document store reports back to its callers."""


class MissingArgument(DocStoreError):
    """A required request argument was not given, or was given empty."""

    def __init__(self, *names: str):
        self.names = names
        super().__init__(f"You need to provide the required arguments: {', '.join(names)}.")


class UnknownType(DocStoreError):
    """The document type has never been created in this store."""

    def __init__(self, type_: str):
        self.type = type_
        super().__init__(f"Invalid or non-existent type value given: {type_!r}.")


class NotFound(DocStoreError):
    def __init__(self, type_: str, guid: str):
        self.type = type_
        self.guid = guid
        super().__init__(f"Object not found, check values (type={type_!r}, guid={guid!r}).")


class UnknownAction(DocStoreError):
    def __init__(self, action):
        self.action = action
        super().__init__(f"You haven't provided a valid act value: {action!r}.")


class InvalidRequest(DocStoreError):
    """The request could not be parsed into the shape the store accepts."""


class ReadOnlyError(DocStoreError):
    def __init__(self):
        super().__init__("document store is read only")
