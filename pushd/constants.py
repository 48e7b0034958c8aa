"""Constants used across pushd.

Values here are part of the wire contract with the presence writers and the
push consumers; change them only together with those collaborators.
"""

# Presence store keys
OPEN_CHANNELS_PREFIX = "open_channels"  # open_channels:{user_id}:{session_id} -> set of channel ids
OPEN_SESSIONS_PREFIX = "open_sessions"  # open_sessions:{user_id} -> set of session ids
PRESENCE_TTL_SECONDS = 300
PRESENCE_LOOKUP_TIMEOUT = 2.0  # Seconds per recipient before treating the store as unreachable
PRESENCE_MAX_CONCURRENCY = 32

# Redis internal settings
REDIS_MAX_CONNECTIONS = 10
REDIS_SOCKET_TIMEOUT = 5
REDIS_SCAN_COUNT = 100

# Broker envelope
CONTENT_TYPE_JSON = "application/json"
DEDUPLICATION_HEADER = "x-deduplication-header"
AMQP_PUBLISH_TIMEOUT = 10.0

# Routing-key suffixes selected by the `production` flag
ROUTING_SUFFIX_PRODUCTION = "_prd"
ROUTING_SUFFIX_TESTING = "_tst"

# Redaction
SPOILER_PLACEHOLDER = "(스포일러)"
