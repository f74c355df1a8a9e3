"""Error types shared by the store, the view and the API layer."""


class EduShareError(Exception):
    """Base class for EduShare errors."""


class TransientFetchError(EduShareError):
    """A read from the message store failed; previously fetched data stays valid."""


class MutationFailure(EduShareError):
    """A create or update against the message store did not go through."""


class MessageNotFoundError(MutationFailure):
    """The message addressed by an update does not exist."""

    def __init__(self, message_id):
        super().__init__(f"Message not found: {message_id}")
        self.message_id = message_id
