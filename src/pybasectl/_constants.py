"""Internal constants shared across the library."""

#: The only protocol major version this client speaks.
ACCEPTABLE_PROTOCOL_MAJOR_VERSION = 1

LINEAR_SPEED = 0.1  # m/s
ANGULAR_SPEED = 0.5  # rad/s

# ------------------------------------------------------------------
# Timing (seconds)
# ------------------------------------------------------------------

TICK_INTERVAL = 0.010
POLL_INTERVAL = 0.050
RELEASE_GRACE = 0.100
ERROR_NOTICE_TTL = 3.0

# Eviction windows for the keyboard debouncer.  A first press only gets the
# long window; once a terminal key-repeat is seen the short one applies.
TAP_RELEASE_TIMEOUT = 0.500
HOLD_RELEASE_TIMEOUT = 0.100
INITIAL_RELEASE_TIMEOUT = 0.100

# ------------------------------------------------------------------
# Operator-facing notices
# ------------------------------------------------------------------

NOTICE_CONTROL_HELD_ELSEWHERE = "Control in hands of another user"
NOTICE_PROTOCOL_MISMATCH = "Protocol version mismatch"
