"""Triage session state machine."""

from issuetriage.session.reducer import reduce
from issuetriage.session.runner import TriageSession
from issuetriage.session.state import Phase, SessionState, initial_state

__all__ = ["Phase", "SessionState", "TriageSession", "initial_state", "reduce"]
