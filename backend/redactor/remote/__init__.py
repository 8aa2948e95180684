"""
Clients for the remote document processing service.

ProcessingServiceClient is the HTTP transport; RemoteJobClient and
ContentStore build the job and workfile contracts on top of it.
"""

from redactor.remote.client import ProcessingServiceClient
from redactor.remote.content_store import ContentId, ContentStore
from redactor.remote.jobs import JobHandle, RemoteJobClient

__all__ = [
    "ContentId",
    "ContentStore",
    "JobHandle",
    "ProcessingServiceClient",
    "RemoteJobClient",
]
