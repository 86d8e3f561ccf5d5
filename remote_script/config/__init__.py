"""Configuration module for remote_script.

- Settings: Environment variable configuration
- Host key policies: how the remote host identity is verified
"""

from remote_script.config.host_keys import (
    AcceptAnyHostKey,
    HostKeyPolicy,
    KnownHostsPolicy,
    PinnedFingerprintPolicy,
    policy_from_settings,
)
from remote_script.config.settings import Settings

__all__ = [
    "AcceptAnyHostKey",
    "HostKeyPolicy",
    "KnownHostsPolicy",
    "PinnedFingerprintPolicy",
    "Settings",
    "policy_from_settings",
]
