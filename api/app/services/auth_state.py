"""
Session state for an authenticated caller.

Replaces independent loading/role flags with one named state, so a request
is never both "signed in" and "profile missing" without saying so.
"""

UNAUTHENTICATED = "unauthenticated"
AUTHENTICATING = "authenticating"
PROFILE_PENDING = "authenticated_profile_pending"
READY = "authenticated_ready"

AUTH_STATES = (UNAUTHENTICATED, AUTHENTICATING, PROFILE_PENDING, READY)

_TRANSITIONS: dict[tuple[str, str], str] = {
    (UNAUTHENTICATED, "sign_in_started"): AUTHENTICATING,
    (UNAUTHENTICATED, "session_established"): PROFILE_PENDING,
    (AUTHENTICATING, "session_established"): PROFILE_PENDING,
    (AUTHENTICATING, "sign_in_failed"): UNAUTHENTICATED,
    (PROFILE_PENDING, "profile_loaded"): READY,
    (READY, "profile_missing"): PROFILE_PENDING,
}


def advance_auth_state(current: str, event: str) -> str:
    if event in {"signed_out", "session_expired"}:
        return UNAUTHENTICATED
    if current not in AUTH_STATES:
        return UNAUTHENTICATED
    return _TRANSITIONS.get((current, event), current)


def resolve_auth_state(has_session: bool, profile_loaded: bool) -> str:
    state = UNAUTHENTICATED
    if not has_session:
        return state
    state = advance_auth_state(state, "session_established")
    if profile_loaded:
        state = advance_auth_state(state, "profile_loaded")
    return state
