"""
Carbon credit and alerting constants.
"""

# Conversion: 1 Carbon Credit = 1 metric tonne CO2, readings arrive in kg
KG_PER_CREDIT = 1000.0

# Severity bands, as multiples of the active threshold (strict >)
CRITICAL_MULTIPLIER = 1.2
HIGH_MULTIPLIER = 1.1

ALERT_TYPE_THRESHOLD_EXCEEDED = "threshold_exceeded"

# Query page size for recent readings and alerts
RECENT_LIMIT = 50

# Identifier prefixes
EMISSION_ID_PREFIX = "EM"
CREDIT_ID_PREFIX = "CC"
MAP_ID_PREFIX = "MAP"
ALERT_ID_PREFIX = "ALERT"
