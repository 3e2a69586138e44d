"""Input length limits shared by request schemas."""

from typing import Final

USERNAME_MIN: Final = 2
USERNAME_MAX: Final = 20
PASSWORD_MIN: Final = 8
PASSWORD_SPECIALS: Final = '!@#$%^&*(),.?":{}|<>'

THREAD_TITLE_MAX: Final = 200
THREAD_CONTENT_MAX: Final = 10_000
REPLY_CONTENT_MAX: Final = 5_000

PROFILE_FIELD_MAX: Final = 100
DISEASE_TEXT_MAX: Final = 50
MAX_DISEASE_ENTRIES: Final = 20
HOSPITAL_NAME_MAX: Final = 100
MAX_HOSPITALS: Final = 10
AGE_MAX: Final = 150

GURU_INTRO_MAX: Final = 2_000
GURU_QUESTION_TITLE_MAX: Final = 200
GURU_QUESTION_CONTENT_MAX: Final = 5_000
GURU_REPLY_CONTENT_MAX: Final = 5_000

SEARCH_LIMIT_MAX: Final = 100
