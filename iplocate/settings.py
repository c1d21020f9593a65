import os

from iplocate.models.request_models import Provider, ProviderConfig

# Environment variable holding the API key (or token) for each provider.
API_KEY_ENV_VARS: dict[Provider, str] = {
    Provider.ipstack: "IPSTACK_API_KEY",
    Provider.ipdata: "IPDATA_API_KEY",
    Provider.ipinfo: "IPINFO_TOKEN",
    Provider.ipapi: "IPAPI_KEY",
    Provider.ipgeolocation: "IPGEOLOCATION_API_KEY",
}


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    """Service settings read from environment variables at construction time."""

    def __init__(self) -> None:
        self.default_provider = Provider(os.getenv("IPLOCATE_DEFAULT_PROVIDER", Provider.ipapi.value))
        self.locale = os.getenv("IPLOCATE_LOCALE", "en")
        self.timeout_seconds = float(os.getenv("IPLOCATE_TIMEOUT_SECONDS", "5.0"))
        self.hostname_lookup = _env_flag("IPLOCATE_HOSTNAME_LOOKUP")
        self.api_keys: dict[Provider, str | None] = {
            provider: os.getenv(env_var) or None for provider, env_var in API_KEY_ENV_VARS.items()
        }

    def provider_config(self, provider: Provider, target_ips: list[str] | None = None) -> ProviderConfig:
        """Build the client configuration for `provider` from the environment."""
        return ProviderConfig(
            target_ips=target_ips,
            api_key=self.api_keys.get(provider),
            locale=self.locale,
            hostname_lookup=self.hostname_lookup,
            timeout_seconds=self.timeout_seconds,
        )


def get_settings() -> Settings:
    """Dependency to provide a Settings instance."""
    return Settings()
