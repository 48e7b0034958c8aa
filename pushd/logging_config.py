"""pushd logging configuration.

pushd uses the shared InstruktAI logging standard (`instrukt_ai_logging`).
Logs go to the canonical location for the `pushd` app; installation is
responsible for provisioning the log directory.
"""

from __future__ import annotations

import os
from typing import Optional

from instrukt_ai_logging import configure_logging


def setup_logging(level: Optional[str] = None) -> None:
    """Configure pushd logging.

    Args:
        level: Optional override for `PUSHD_LOG_LEVEL`.
    """
    if level:
        os.environ["PUSHD_LOG_LEVEL"] = level

    configure_logging("pushd")
