from .clients_client import ClientsClient
from .events_client import EventsClient
from .exports_client import ExportsClient
from .remarks_client import RemarksClient
from .superadmin_client import SuperAdminClient

__all__ = [
    "ClientsClient",
    "EventsClient",
    "ExportsClient",
    "RemarksClient",
    "SuperAdminClient",
]
