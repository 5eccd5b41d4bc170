from faxmonitor.config.settings import Settings
from faxmonitor.fax.base import BaseFaxServer
from faxmonitor.fax.memory_adapter import InMemoryFaxServer


class FaxServerFactory:
    """Creates the correct fax server adapter based on settings."""

    ADAPTERS: dict[str, type[BaseFaxServer]] = {
        "memory": InMemoryFaxServer,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseFaxServer:
        source = settings.fax_source.lower()
        adapter_cls = cls.ADAPTERS.get(source)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown fax source '{source}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()
