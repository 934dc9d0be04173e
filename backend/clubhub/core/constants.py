# Roles
ROLE_USER = "USER"
ROLE_MANAGER = "MANAGER"
ROLE_ADMIN = "ADMIN"
ROLES = (ROLE_USER, ROLE_MANAGER, ROLE_ADMIN)

# Event lifecycle
EVENT_DRAFT = "DRAFT"
EVENT_PUBLISHED = "PUBLISHED"
EVENT_CLOSED = "CLOSED"
EVENT_STATUSES = (EVENT_DRAFT, EVENT_PUBLISHED, EVENT_CLOSED)

# Registration states
REG_INTERESTED = "INTERESTED"
REG_PENDING_PAYMENT = "PENDING_PAYMENT"
REG_CONFIRMED = "CONFIRMED"
REG_CANCELLED = "CANCELLED"
REG_REJECTED = "REJECTED"
REG_ATTENDED = "ATTENDED"
REG_NO_SHOW = "NO_SHOW"
REGISTRATION_STATUSES = (
    REG_INTERESTED,
    REG_PENDING_PAYMENT,
    REG_CONFIRMED,
    REG_CANCELLED,
    REG_REJECTED,
    REG_ATTENDED,
    REG_NO_SHOW,
)

# Club approval
CLUB_PENDING = "PENDING"
CLUB_APPROVED = "APPROVED"
CLUB_REJECTED = "REJECTED"
CLUB_STATUSES = (CLUB_PENDING, CLUB_APPROVED, CLUB_REJECTED)

# Join requests
JOIN_PENDING = "PENDING"
JOIN_APPROVED = "APPROVED"
JOIN_REJECTED = "REJECTED"
JOIN_REQUEST_STATUSES = (JOIN_PENDING, JOIN_APPROVED, JOIN_REJECTED)
