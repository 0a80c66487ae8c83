class AdmissionRoutingError(Exception):
    """Base class for all admission-routing domain exceptions.

    Every custom exception in this module inherits from here so that a
    single ``except AdmissionRoutingError`` clause can catch any domain
    error.
    """

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(detail)


class AgentNotFoundError(AdmissionRoutingError):
    """Raised when the agent a lead is being assigned to does not exist."""

    def __init__(self, detail: str = "Agent not found"):
        super().__init__(detail)


class InvalidLeadDataError(AdmissionRoutingError):
    """Raised when lead data is invalid."""

    def __init__(self, detail: str = "Invalid lead data"):
        super().__init__(detail)


class DuplicateCheckError(AdmissionRoutingError):
    """Raised when neither the indexed lookup nor the fallback scan could
    decide whether a lead already exists.

    Uniqueness cannot be silently bypassed, so this is never swallowed on
    the single-lead path.
    """

    def __init__(self, detail: str = "Duplicate check unavailable"):
        super().__init__(detail)


class LeadPersistenceError(AdmissionRoutingError):
    """Raised when the lead-creation transaction was rolled back."""

    def __init__(self, detail: str = "Lead could not be saved"):
        super().__init__(detail)


class MissingActorError(AdmissionRoutingError):
    """Raised when an internal endpoint is called without an actor id."""

    def __init__(self, detail: str = "Authenticated user required"):
        super().__init__(detail)
