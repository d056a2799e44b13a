"""
Collision policy - decides how much of a file still has to be sent.

VERIFY only compares sizes. A remote file at least as large as the local
one counts as complete even if its content differs.
"""
import logging
from typing import Optional

from ..models import Behavior
from ..protocols import ITransferClient

logger = logging.getLogger(__name__)


async def resolve_offset(
    behavior: Behavior,
    client: ITransferClient,
    server_path: str,
    local_size: int,
) -> Optional[int]:
    """
    Byte offset to start the upload at.

    Returns:
        0 for a full transfer, the remote size to resume, or None when no
        transfer is needed
    """
    if behavior == Behavior.SKIP:
        return None

    if behavior == Behavior.COVER:
        return 0

    remote = await client.stat(server_path)
    if remote is None:
        return 0

    if local_size > remote.size:
        logger.debug(f"{server_path}: remote has {remote.size}/{local_size} bytes, resuming")
        return remote.size

    logger.debug(f"{server_path}: remote size {remote.size} >= local {local_size}, not sending")
    return None
