"""
MS Graph client setup.
"""

from azure.identity import ClientSecretCredential
from msgraph import GraphServiceClient

from core.config import Settings

GRAPH_SCOPES = ["https://graph.microsoft.com/.default"]


def build_graph_client(settings: Settings) -> GraphServiceClient:
    """Create an app-only MS Graph client from the configured credentials."""
    credential = ClientSecretCredential(
        tenant_id=settings.graph_tenant_id,
        client_id=settings.graph_app_id,
        client_secret=settings.graph_client_secret,
    )
    return GraphServiceClient(credentials=credential, scopes=GRAPH_SCOPES)
