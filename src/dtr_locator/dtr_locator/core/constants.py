"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

LOCATOR_TYPE_TAG = "LE"
LOCATOR_SEQUENCE_WIDTH = 3

# Sentinel metadata stamped on engine-synthesized punches. The sensor id and
# device serial are reserved and never assigned to a physical terminal.
SYNTH_CHECK_TYPE = "I"
SYNTH_VERIFY_CODE = 1
SYNTH_SENSOR_ID = "101"
SYNTH_WORK_CODE = "0"
SYNTH_DEVICE_SN = "CLXE224760198"
SYNTH_USER_EXT_FMT = 0

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
MONTHLY_STATS_MONTHS = 12

RECONCILE_CONFLICT_RETRIES = 1
