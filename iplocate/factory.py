from iplocate.clients.base import BaseIPLookupClient
from iplocate.clients.ipapi_client import IpApiCom
from iplocate.clients.ipdata_client import IpData
from iplocate.clients.ipgeolocation_client import IpGeolocationIo
from iplocate.clients.ipinfo_client import IpInfo
from iplocate.clients.ipstack_client import IpStack
from iplocate.models.request_models import Provider, ProviderConfig


class IpLookupProviderFactory:
    """Factory for IP lookup provider clients.

    Given a Provider enum and a configuration, returns a concrete client instance.
    """

    PROVIDERS_MAP: dict[Provider, type[BaseIPLookupClient]] = {
        Provider.ipstack: IpStack,
        Provider.ipdata: IpData,
        Provider.ipinfo: IpInfo,
        Provider.ipapi: IpApiCom,
        Provider.ipgeolocation: IpGeolocationIo,
    }

    def __call__(self, provider: Provider, config: ProviderConfig | None = None) -> BaseIPLookupClient:
        client_cls = self.PROVIDERS_MAP[provider]
        return client_cls(config)


def get_ip_lookup_provider_factory() -> IpLookupProviderFactory:
    """Dependency to provide an IpLookupProviderFactory instance."""
    return IpLookupProviderFactory()
