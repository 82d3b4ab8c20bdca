"""Pub/sub topic names."""

USER_SIGNED_IN = "USER_SIGNED_IN"
USER_UPDATED = "USER_UPDATED"
