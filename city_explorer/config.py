from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Required from environment (.env / deployment secrets)
    database_url: str
    app_env: str = "development"  # development, staging, production

    # CORS origins as comma-separated values, "*" allows any origin
    # Example: "https://app.example.com,https://admin.example.com"
    cors_allow_origins: str = "*"

    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR

    # Upstream provider keys
    geocode_api_key: str = ""
    weather_api_key: str = ""
    eventbrite_api_key: str = ""
    movie_api_key: str = ""

    # Upstream provider endpoints
    geocode_base_url: str = "https://maps.googleapis.com/maps/api/geocode/json"
    weather_base_url: str = "https://api.darksky.net/forecast"
    events_base_url: str = "https://www.eventbriteapi.com/v3/events/search"
    movies_base_url: str = "https://api.themoviedb.org/3/search/movie"
    movie_image_base_url: str = "https://image.tmdb.org/t/p/w500"

    # Per-call upstream timeout (seconds)
    upstream_timeout_seconds: float = 10.0

    # Cache freshness per category (milliseconds)
    weather_ttl_ms: int = 15000
    events_ttl_ms: int = 30000
    movies_ttl_ms: int = 30000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def missing_api_keys(self) -> list[str]:
        keys = {
            "GEOCODE_API_KEY": self.geocode_api_key,
            "WEATHER_API_KEY": self.weather_api_key,
            "EVENTBRITE_API_KEY": self.eventbrite_api_key,
            "MOVIE_API_KEY": self.movie_api_key,
        }
        return [name for name, value in keys.items() if not (value or "").strip()]


settings = Settings()
