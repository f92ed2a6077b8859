# -*- coding: utf-8 -*-
"""
Exception hierarchy for headline_poller.

Configuration errors are fatal and stop the process before the scheduler
starts. Fetch and store errors are recovered at the tick boundary.
"""

from typing import Optional


class HeadlinePollerError(Exception):
    """Base class for all errors raised by headline_poller."""


# ============================================================================
# CONFIGURATION ERRORS (FATAL)
# ============================================================================

class ConfigError(HeadlinePollerError):
    """Configuration could not be resolved."""


class ConfigMissing(ConfigError):
    """A mandatory field is absent from every source."""


class MissingApiKey(ConfigMissing):
    pass


class MissingCountryCode(ConfigMissing):
    pass


class ConfigInvalid(ConfigError):
    """A field is present but outside its allowed values."""


class InvalidCountryCode(ConfigInvalid):
    pass


class InvalidRefreshInterval(ConfigInvalid):
    pass


class ConfigFileError(ConfigError):
    """A config file exists but could not be read or decoded."""


class ConfigSaveError(HeadlinePollerError):
    """Writing the config file failed. Never fatal."""


# ============================================================================
# PIPELINE ERRORS (RECOVERED PER TICK)
# ============================================================================

class FetchError(HeadlinePollerError):
    """The headline request produced no usable batch."""


class RemoteError(FetchError):
    """Non-success response, or no response at all."""

    def __init__(self, status_code: Optional[int], body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"status={status_code}: {body}")


class DecodeError(FetchError):
    """A payload or config file did not have the expected shape."""


class StoreError(HeadlinePollerError):
    """The article database rejected an operation."""
