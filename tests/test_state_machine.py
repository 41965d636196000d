"""Unit tests for verification state-machine guardrails."""

import pytest

from guidepay.common.state_machine import TERMINAL_STATES, validate_transition


def test_valid_transition():
    """Sanity check: a legal transition should pass."""

    validate_transition("RECEIVED", "SIGNATURE_CHECKED")
    validate_transition("LOGGED", "FAILED")


def test_invalid_transition():
    """Skipping the ledger step must raise to protect ordering."""

    with pytest.raises(ValueError):
        validate_transition("SIGNATURE_CHECKED", "NOTIFIED")


def test_rejected_only_before_signature_check():
    with pytest.raises(ValueError):
        validate_transition("LOGGED", "REJECTED")


@pytest.mark.parametrize("state", sorted(TERMINAL_STATES))
def test_terminal_states_have_no_exits(state):
    with pytest.raises(ValueError):
        validate_transition(state, "RECEIVED")
