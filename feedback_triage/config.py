"""Configuration management for the feedback triage service."""
import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration."""

    # OpenAI Configuration
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
    AI_MODEL = os.getenv("AI_MODEL", "gpt-3.5-turbo")
    AI_TIMEOUT_SECONDS = int(os.getenv("AI_TIMEOUT_SECONDS", "5"))
    AI_PROVIDER_ENABLED = os.getenv("AI_PROVIDER_ENABLED", "true").lower() == "true"

    # API Configuration
    API_KEY = os.getenv("API_KEY", "test-api-key-12345")

    # Database Configuration
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./feedback.db")

    # Alert Configuration
    ALERT_WEBHOOK_URL = os.getenv("ALERT_WEBHOOK_URL", "")
    ALERT_ENABLED = os.getenv("ALERT_ENABLED", "false").lower() == "true"

    # Field limits
    MAX_MESSAGE_LENGTH = 2000
    MAX_TOPIC_LENGTH = 50
    MAX_SUGGESTIONS_LENGTH = 300

    # Dashboard
    TOP_TOPICS_LIMIT = 5
    RECENT_DAYS_LIMIT = 7
    FEEDBACK_PAGE_SIZE = int(os.getenv("FEEDBACK_PAGE_SIZE", "50"))

    # Alert triggers, scanned in this order
    ALERT_KEYWORDS = [
        "harassment", "discrimination", "unsafe", "bullying", "threat",
        "inappropriate", "unfair treatment", "racism", "sexism", "abuse"
    ]
    HIGH_SEVERITY_KEYWORDS = ["threat", "abuse", "harassment"]

    # Fallback sentiment word lists
    POSITIVE_WORDS = [
        "good", "great", "excellent", "amazing", "love", "like", "helpful", "clear"
    ]
    NEGATIVE_WORDS = [
        "bad", "terrible", "awful", "hate", "confusing", "difficult", "boring", "poor"
    ]

    # Fallback topics
    DEFAULT_TOPIC = "general"
    FALLBACK_TOPICS = [
        "teaching",
        "course content",
        "assignments",
        "facilities",
        "support",
        "general"
    ]
    TOPIC_KEYWORDS = {
        "teaching": [
            "teach", "lecture", "professor", "instructor", "explain", "explanation", "tutor"
        ],
        "course content": [
            "content", "material", "syllabus", "curriculum", "topic", "slides", "reading"
        ],
        "assignments": [
            "assignment", "homework", "exam", "quiz", "project", "deadline", "grading", "grade"
        ],
        "facilities": [
            "classroom", "room", "library", "lab", "wifi", "building", "equipment", "projector"
        ],
        "support": [
            "support", "office hours", "help desk", "advisor", "counsel", "mentor", "email"
        ]
    }

    FALLBACK_SUGGESTIONS = {
        "positive": "Continue current practices and consider expanding successful approaches.",
        "negative": "Review feedback areas and implement targeted improvements.",
        "neutral": "Gather more specific feedback to identify improvement opportunities."
    }


config = Config()
