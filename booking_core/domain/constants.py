"""Domain constants for the booking flow."""

# Terminal outcomes
OUTCOME_COMPLETED = "completed"
OUTCOME_ABANDONED = "abandoned"

# Processor payment statuses
PAYMENT_STATUS_REQUIRES_PAYMENT_METHOD = "requires_payment_method"
PAYMENT_STATUS_REQUIRES_CONFIRMATION = "requires_confirmation"
PAYMENT_STATUS_REQUIRES_ACTION = "requires_action"
PAYMENT_STATUS_PROCESSING = "processing"
PAYMENT_STATUS_SUCCEEDED = "succeeded"
PAYMENT_STATUS_CANCELED = "canceled"
PAYMENT_STATUS_FAILED = "failed"

# Booking status returned by the booking endpoint
BOOKING_STATUS_CONFIRMED = "confirmed"
BOOKING_STATUS_PENDING = "pending"
BOOKING_STATUS_CANCELLED = "cancelled"

GUEST_USER_KEY = "guest"

ERROR_MESSAGES = {
    "AVAILABILITY_CHECK_FAILED": "We're having trouble checking availability. Please try again.",
    "PRICING_FAILED": "We couldn't load pricing for this room. Please try again.",
    "BOOKING_FAILED": "We couldn't complete your booking. Your card has not been charged.",
    "PAYMENT_DECLINED": (
        "Your payment was declined. Please check your card details or try another card."
    ),
    "PAYMENT_SETUP_FAILED": "We couldn't prepare the payment form. Please try again.",
    "PAYMENT_REQUIRES_CONTACT": (
        "Your payment could not be completed. Please contact support before trying again."
    ),
    "NETWORK_ERROR": "Connection lost. Please check your internet and try again.",
    "HOTEL_UNAVAILABLE": "This hotel is no longer available for your dates.",
    "VALIDATION_ERROR": "Please check your information and try again.",
    "RATE_LIMIT_ERROR": "Too many requests. Please wait a moment before trying again.",
    "UNKNOWN_ERROR": "Something went wrong. Please try again or contact support.",
}

# User-facing messages for processor error codes
PAYMENT_ERROR_MESSAGES = {
    "card_declined": "Your card was declined. Please try another payment method.",
    "insufficient_funds": "Your card has insufficient funds. Please try another card.",
    "expired_card": "Your card has expired. Please use a different card.",
    "incorrect_cvc": "The security code (CVC) is incorrect. Please check and try again.",
    "processing_error": "An error occurred while processing your card. Please try again.",
    "incorrect_number": "The card number is incorrect. Please check and try again.",
    "invalid_expiry_month": "The expiration month is invalid.",
    "invalid_expiry_year": "The expiration year is invalid.",
    "authentication_required": (
        "Additional authentication is required. Please complete the verification."
    ),
}

PAYMENT_ERROR_FALLBACK_MESSAGE = (
    "We couldn't process your payment. Please check your card details and try again."
)

COUNTRIES = (
    "United States",
    "United Kingdom",
    "Canada",
    "Australia",
    "Germany",
    "France",
    "Spain",
    "Italy",
    "Japan",
    "China",
    "India",
    "Brazil",
    "Mexico",
    "Netherlands",
    "Sweden",
    "Norway",
    "Denmark",
    "Finland",
    "Switzerland",
    "Austria",
    "Belgium",
    "Portugal",
    "Greece",
    "Ireland",
    "New Zealand",
    "Singapore",
    "South Korea",
    "Thailand",
    "Vietnam",
    "Indonesia",
    "Malaysia",
    "Philippines",
    "Argentina",
    "Chile",
    "Colombia",
    "Peru",
    "South Africa",
    "Egypt",
    "Morocco",
    "Turkey",
    "United Arab Emirates",
    "Saudi Arabia",
    "Israel",
    "Poland",
    "Czech Republic",
    "Hungary",
    "Romania",
    "Russia",
    "Ukraine",
)
