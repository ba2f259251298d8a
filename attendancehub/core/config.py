from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    DATABASE_URL: str = "postgresql+asyncpg://hub:hub_secret@db:5432/attendancehub"
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    RUN_MIGRATIONS_ON_STARTUP: bool = True
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Jornada laboral fija (hora local, HH:MM)
    SCHEDULED_ENTRY_TIME: str = "09:00"
    SCHEDULED_EXIT_TIME: str = "18:00"
    TARDY_TOLERANCE_MINUTES: int = 5
    LUNCH_BREAK_MINUTES: int = 60

    # Sueldo promedio asumido para la deducción estimada del reporte (no es planilla)
    ESTIMATED_AVERAGE_SALARY: float = 3000.0

    FUZZY_MATCH_THRESHOLD: int = 90

    AUDIT_LOG_MAX_ENTRIES: int = 1000

    DEDUCTION_TARDY_MINUTE_RATE: float = 0.50
    DEDUCTION_ABSENCE_DAY_RATE: float = 100.0
    DEDUCTION_EARLY_LEAVE_MINUTE_RATE: float = 0.50
    DEDUCTION_TOLERANCE_MINUTES: int = 10


settings = Settings()
