"""Global constants for the ricgcw application."""

# Collection names
MEMBERS_COLLECTION = "members"
EVENTS_COLLECTION = "events"
ATTENDANCE_COLLECTION = "attendance"
TRANSACTIONS_COLLECTION = "transactions"
RESOURCES_COLLECTION = "resources"
BIBLE_STUDIES_COLLECTION = "bible-studies"
TARGETS_COLLECTION = "targets"
CONTRIBUTIONS_COLLECTION = "contributions"
MEMBER_NAMES_COLLECTION = "member-names"
USERS_COLLECTION = "users"

# Field names shared across collections
FIELD_ID = "id"
FIELD_NAME = "name"
FIELD_DATE = "date"
FIELD_BRANCH = "branch"
FIELD_CREATED_AT = "createdAt"
FIELD_DOB = "dob"

# Enumerations
MEMBER_STATUSES = ("active", "inactive", "discontinued")
TRANSACTION_TYPES = ("contribution", "expense")
RESOURCE_TYPES = ("pdf", "audio")
CONTRIBUTION_TYPES = ("tithe", "welfare", "other")

# Birthday reminders
DEFAULT_BIRTHDAY_LEAD_DAYS = 14
DEFAULT_BIRTHDAY_LOCATION = "Main Auditorium"
BIRTHDAY_EVENT_PREFIX = "🎂 Birthday: "
BIRTHDAY_EVENT_TIME = "00:00"

# Resource uploads
RESOURCE_UPLOAD_PREFIX = "resources"

# Development login accounts, used only when no credential store is configured.
DEFAULT_ACCOUNTS = [
    {
        "email": "admin@ricgcw.com",
        "password": "admin123",  # nosec B105
        "role": "admin",
        "branch": "all",
    },
]
