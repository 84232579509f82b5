"""Snapshot redaction – sensitive attributes never reach the audit trail."""
from erp.conf import erp_setting

ALWAYS_REDACTED = frozenset({"password", "remember_token", "api_token"})


def redacted_names(hidden=()):
    return ALWAYS_REDACTED | set(erp_setting("AUDIT", "REDACTED_FIELDS")) | set(hidden)


def redact(snapshot, hidden=()):
    """Return a copy of ``snapshot`` without redacted keys.

    Keys are removed rather than masked, so redacting twice is a no-op.
    """
    if snapshot is None:
        return None
    excluded = redacted_names(hidden)
    return {key: value for key, value in snapshot.items() if key not in excluded}
