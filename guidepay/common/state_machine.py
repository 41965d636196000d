"""Verification pipeline state transitions enforced by the orchestrator."""

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "RECEIVED": {"SIGNATURE_CHECKED", "REJECTED"},
    "SIGNATURE_CHECKED": {"LOGGED", "FAILED"},
    "LOGGED": {"NOTIFIED", "FAILED"},
    "NOTIFIED": {"DONE", "FAILED"},
    "DONE": set(),
    "REJECTED": set(),
    "FAILED": set(),
}

TERMINAL_STATES = {"DONE", "REJECTED", "FAILED"}


def validate_transition(current: str, new: str) -> None:
    """Raise when a transition is not allowed by the state machine."""

    if new not in ALLOWED_TRANSITIONS.get(current, set()):
        raise ValueError(f"Invalid transition: {current} -> {new}")
