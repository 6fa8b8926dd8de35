class InvalidStatusTransition(Exception):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"SOH reference cannot move from '{current}' to '{target}'.")


class IngestionRejected(Exception):
    """
    The upload was refused for a client-side reason (missing input, empty
    file, bad headers, no valid rows). Maps to HTTP 400.
    """
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class DeletionConflict(Exception):
    """A deletion request clashes with the reference's current state. Maps to HTTP 409."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidDeletionLink(Exception):
    """
    A confirmation link cannot be honoured. `reason` is the code passed to the
    front-end's invalid-link page (e.g. "Token_expired").
    """
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)
