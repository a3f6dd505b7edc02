"""Remote service HTTP plumbing."""

from onboardkit.core.http.client import RemoteServiceClient, response_json


__all__ = ["RemoteServiceClient", "response_json"]
