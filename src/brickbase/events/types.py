"""Event type constants.

Learn: Centralizing event types as constants prevents typos and
makes it easy to discover all event types in the system.
"""

# ─── Agreement lifecycle ────────────────────────────────

AGREEMENT_SUBMITTED = "agreement.submitted"
AGREEMENT_DECIDED = "agreement.decided"

# ─── Residents ──────────────────────────────────────────

USER_CREATED = "user.created"
USER_ROLE_CHANGED = "user.role_changed"

# ─── Building content ───────────────────────────────────

ANNOUNCEMENT_POSTED = "announcement.posted"
COUPON_CREATED = "coupon.created"
COUPON_STATUS_CHANGED = "coupon.status_changed"
PAYMENT_RECORDED = "payment.recorded"
