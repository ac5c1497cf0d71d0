from careerbridge.models import LanguageLevel, Page

PROFILE_STORAGE_KEY = "careerbridge_user_profile"
SAVED_ANALYSIS_STORAGE_KEY = "careerbridge_saved_analysis"

FIELDS = [
    "Software Engineering",
    "Data Science",
    "Business / Management",
    "Luxury / Fashion",
    "Hospitality / Tourism",
    "Engineering / Industry",
    "Arts / Design",
]

VISA_TYPES = [
    "VLS-TS Student",
    "APS / Recepissee",
    "Passeport Talent",
    "Work Visa (Salarié)",
    "EU Blue Card",
]

LANGUAGE_LEVEL_LABELS = {
    LanguageLevel.A1: "A1 - Beginner",
    LanguageLevel.A2: "A2 - Elementary",
    LanguageLevel.B1: "B1 - Intermediate",
    LanguageLevel.B2: "B2 - Upper Intermediate",
    LanguageLevel.C1: "C1 - Advanced",
    LanguageLevel.C2: "C2 - Native / Fluent",
}

NAV_ITEMS = [
    ("Home", Page.HOME),
    ("Dashboard", Page.DASHBOARD),
    ("Find Jobs", Page.JOB_SEARCH),
    ("CV Tailor", Page.CV_TAILOR),
    ("Interview Coach", Page.INTERVIEW_COACH),
]

# Gateway fallbacks for empty provider content
NO_POSTINGS_TEXT = "No current postings found. Please refine your search keywords."
UNTITLED_SOURCE_TITLE = "Job Posting / Recruiter Link"
COVER_LETTER_FALLBACK = "Unable to generate cover letter."
INTERVIEW_QUESTION_FALLBACK = "Please describe your professional experience in France."

INTERVIEW_ANSWERS_PER_SESSION = 4
INTERVIEW_CLOSING_MESSAGE = (
    "Thank you for these responses. I've prepared a feedback report for you above."
)

SAVE_INDICATOR_SECONDS = 3.0

PROFILE_INCOMPLETE_HINT = "Please fill in your name, field, and visa type to continue."
NO_SOURCES_PLACEHOLDER = "No sources to display"
LOADING_SOURCES_PLACEHOLDER = "Identifying Sources..."
