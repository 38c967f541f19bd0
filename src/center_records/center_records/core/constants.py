"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_REGULAR_FULL_MARK = 10
DEFAULT_SESSION_LIST_LIMIT = 50

STUDENT_ID_DIGITS = 11
PHONE_DIGITS = 11
MIN_FULL_NAME_LENGTH = 3

MIN_SEARCH_QUERY_LENGTH = 2
SEARCH_RESULT_LIMIT = 20

# Stored in place of a grade when a student has none for the session.
NO_GRADE = "-"
MIN_GRADE = 0
MAX_GRADE = 100

ALL_LABEL = "الكل"
