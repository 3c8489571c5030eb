from enum import Enum


class FailureKind(Enum):
    """Classes of terminal registration outcomes, one per response shape."""
    VALIDATION = "validation"
    CONFLICT = "conflict"
    CONFIGURATION = "configuration"
    UPSTREAM_AUTH = "upstream_auth"
    UPSTREAM_PERSISTENCE = "upstream_persistence"
