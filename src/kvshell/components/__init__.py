"""Store backends and backend selection."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..core.config import MEMORY_SCHEME, TIKV_SCHEME
from ..core.errors import StoreOpenError
from .memory import MemoryStorage
from .tikv import TiKVStorage

if TYPE_CHECKING:
    from ..core.config import ShellConfig
    from ..interfaces.store import Storage

logger = logging.getLogger(__name__)


def open_storage(config: ShellConfig) -> Storage:
    """Open the backend named by ``config.pd_addr``.

    Raises:
        StoreOpenError: Unknown scheme, missing driver or unreachable cluster
    """
    scheme = config.scheme
    logger.info(f"Opening store {config.store_url}")

    if scheme == MEMORY_SCHEME:
        return MemoryStorage()
    if scheme == TIKV_SCHEME:
        endpoints = config.pd_endpoints
        if not endpoints:
            raise StoreOpenError(f"no pd address in {config.store_url!r}")
        return TiKVStorage(endpoints, scan_batch_size=config.scan_batch_size)

    raise StoreOpenError(f"unsupported store scheme {scheme!r} in {config.pd_addr!r}")


__all__ = ["MemoryStorage", "TiKVStorage", "open_storage"]
