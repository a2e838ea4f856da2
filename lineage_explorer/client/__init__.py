"""Client package: Data Lineage API access and process lookup."""

from lineage_explorer.client.fetcher import LinkFetcher
from lineage_explorer.client.http import LineageApiClient
from lineage_explorer.client.models import LineageLink, Process
from lineage_explorer.client.processes import ProcessResolver

__all__ = ["LineageApiClient", "LinkFetcher", "ProcessResolver", "LineageLink", "Process"]
