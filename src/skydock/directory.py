from typing import Any, Protocol


class ResourceDirectory(Protocol):
    """
    Listing collaborator for projects, regions, zones, machine types and
    service accounts. GKEService delegates to it and does not implement
    these queries.
    """

    def list_projects(self, query: str | None = None) -> Any: ...

    def list_regions(self, fields: Any = None) -> Any: ...

    def list_zones(self, region: str | None = None, fields: Any = None) -> Any: ...

    def list_machine_types(
        self, zone: str, fields: Any = None, page_token: str | None = None
    ) -> Any: ...

    def list_service_accounts(self) -> Any: ...
