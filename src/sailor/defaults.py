"""
Ready-made resource declarations for common deployments.

Mounted declarations look in /etc/sailor, where the platform mounts the
app's ConfigMap and Secret volumes. Pull declarations refresh every
10 seconds unless they are one-shot.
"""

from .core.models import (
    DEFAULT_MOUNT_PATH,
    DEFAULT_POLL_INTERVAL,
    FetchStrategy,
    ResourceDeclaration,
    ResourceKind,
)


def config_map_default(path: str = DEFAULT_MOUNT_PATH) -> ResourceDeclaration:
    """Config from the mounted volume, watched for changes, with fallback."""
    return ResourceDeclaration(
        kind=ResourceKind.CONFIG,
        path=path,
        strategy=FetchStrategy.MOUNTED_PATH,
        fallback_enabled=True,
    )


def secrets_default(path: str = DEFAULT_MOUNT_PATH) -> ResourceDeclaration:
    """Secrets from the mounted volume, watched for changes, with fallback."""
    return ResourceDeclaration(
        kind=ResourceKind.SECRET,
        path=path,
        strategy=FetchStrategy.MOUNTED_PATH,
        fallback_enabled=True,
    )


def misc_once_default(name: str) -> ResourceDeclaration:
    """A misc resource pulled from the backend once, never refreshed."""
    return ResourceDeclaration(
        kind=ResourceKind.MISC,
        name=name,
        strategy=FetchStrategy.REMOTE_PULL,
        once=True,
        fallback_enabled=True,
    )


def config_pull_default(interval: float = DEFAULT_POLL_INTERVAL) -> ResourceDeclaration:
    return ResourceDeclaration(
        kind=ResourceKind.CONFIG,
        strategy=FetchStrategy.REMOTE_PULL,
        poll_interval=interval,
        fallback_enabled=True,
    )


def secrets_pull_default(interval: float = DEFAULT_POLL_INTERVAL) -> ResourceDeclaration:
    return ResourceDeclaration(
        kind=ResourceKind.SECRET,
        strategy=FetchStrategy.REMOTE_PULL,
        poll_interval=interval,
        fallback_enabled=True,
    )


def misc_pull_default(name: str, interval: float = DEFAULT_POLL_INTERVAL) -> ResourceDeclaration:
    return ResourceDeclaration(
        kind=ResourceKind.MISC,
        name=name,
        strategy=FetchStrategy.REMOTE_PULL,
        poll_interval=interval,
        fallback_enabled=True,
    )
