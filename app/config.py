from pydantic_settings import BaseSettings
from dotenv import load_dotenv
import logging

load_dotenv()
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./database/quizroom.db"

    # JWT Configuration
    secret_key: str = "your-super-secret-jwt-key-change-this-in-production"
    algorithm: str = "HS256"
    access_token_expire_days: int = 30

    # Question generation (Gemini REST API)
    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    generation_timeout_seconds: float = 60.0
    generation_max_retries: int = 3
    generation_retry_delay: float = 1.0

    # Quiz Configuration
    default_question_count: int = 5
    max_question_count: int = 50

    # Room Configuration
    room_code_max_attempts: int = 50
    poll_interval_seconds: int = 3

    # Password reset
    reset_token_expire_minutes: int = 60
    frontend_url: str = "http://localhost:3001"

    # SMTP Configuration
    smtp_host: str = "smtp.ethereal.email"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    from_email: str = ""
    from_name: str = "QuizRoom"

    # Application Configuration
    debug: bool = False

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore"  # Ignore extra fields
    }

    def is_email_configured(self) -> bool:
        """Check if email is properly configured"""
        is_configured = bool(self.smtp_username and self.smtp_password and self.from_email)

        if not is_configured:
            logger.warning("⚠️ Email configuration incomplete - emails will not be sent")
            logger.warning(f"SMTP_USERNAME: {'✅' if self.smtp_username else '❌'}")
            logger.warning(f"SMTP_PASSWORD: {'✅' if self.smtp_password else '❌'}")
            logger.warning(f"FROM_EMAIL: {'✅' if self.from_email else '❌'}")

        return is_configured

    def is_generation_configured(self) -> bool:
        """Check if the question generator has an API key"""
        if not self.gemini_api_key:
            logger.warning("⚠️ GEMINI_API_KEY not set - quizzes will use the fallback question bank")
            return False
        return True


settings = Settings()
