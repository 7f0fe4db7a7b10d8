ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = {ROLE_USER, ROLE_ADMIN}

OTP_DIGITS = 6
OTP_TTL_MINUTES = 10
OTP_MAX_ATTEMPTS = 5

DEVICE_SESSION_TTL_DAYS = 7
DEVICE_TOKEN_BYTES = 32

SESSION_TOKEN_TTL_DAYS = 30

SHORT_CODE_LENGTH = 7
FAVICON_SERVICE = "https://www.google.com/s2/favicons"
