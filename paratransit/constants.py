"""Booking-service business rules and wire constants.

Update these when the operator's policies change; nothing else in the
package hardcodes them.
"""

BUSINESS_RULES = {
    # Maximum days in advance a trip may be booked
    "advance_booking_max_days": 3,
    # Minimum notice for same-day (or post-cutoff) bookings
    "same_day_min_minutes": 120,
    # Minimum notice to cancel a trip
    "cancellation_min_minutes": 120,
    # Cancellations inside this many minutes are allowed but discouraged
    "cancellation_warn_minutes": 180,
    # Day-ahead bookings close at this hour on the day before pickup
    "noon_cutoff_hour": 12,
}

MICRODEGREES_PER_DEGREE = 1_000_000

# Passenger type codes used by the backend
PASSENGER_TYPE_CODES = {
    "escort": "ESC",
    "pca": "PCA",
    "guest": "GUE",
}

# Backend code for the client's own passenger row on a booking
CLIENT_PASSENGER_CODE = "CLI"

# Mobility device codes used by the backend
MOBILITY_AID_CODES = {
    "wheelchair": "WC",
    "scooter": "SC",
    "walker": "WA",
}

# Bookable hours shown when PassBookingTimesWindow leaves a bound unset
DEFAULT_BOOKING_TIMES = (6 * 3600, 23 * 3600)

MONTH_ABBREVIATIONS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

DAY_NAMES = [
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
]

# Truncation limit for response bodies written to debug logs
DEBUG_LOG_MAX_LENGTH = 500
