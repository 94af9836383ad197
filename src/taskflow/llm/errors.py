# src/taskflow/llm/errors.py

from __future__ import annotations


class RemoteParsingError(RuntimeError):
    """Base class for failures of the hosted-model parsing path."""


class NoCredential(RemoteParsingError):
    """No API key configured: the remote path is unusable (configuration, not a fault)."""


class TransportFailure(RemoteParsingError):
    """The model call itself failed (network, auth, rate limit, server error)."""


class MalformedResponse(RemoteParsingError):
    """The model answered, but not with data matching the task schema."""
