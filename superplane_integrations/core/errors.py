"""Plugin-level exceptions."""

from __future__ import annotations


class ComponentError(Exception):
    """
    Raised by setup/execute when a component cannot do its job.

    Covers configuration decoding and validation failures, missing
    credentials, and semantic failures reported by the remote API that
    the component does not route to an output channel.
    """

    pass


class RegistryError(Exception):
    """Error in plugin registry operations."""

    pass
