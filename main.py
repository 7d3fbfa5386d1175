#!/usr/bin/env python3
"""Project entry point. Bootstraps the panel, the core and the CWS server."""

import logging
import os
import threading

from core import Core
from modules.log_store import LogStore
from modules.panel import PanelState
from modules.panel_logic import PanelLogicModule
from web import Controller

logger = logging.getLogger("cwspanel")


def build_core(panel: PanelState) -> Core:
    """Register the panel logic first so its subscription exists before requests arrive."""
    logic = PanelLogicModule(panel)
    controller = Controller(panel, log_store=LogStore())
    core = Core([logic, controller])
    logic.set_online(True)
    return core


def main() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s %(message)s',
    )
    logger.info({"evt": "startup", "component": "main", "log_level": log_level})

    core = build_core(PanelState())
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        logger.info({"evt": "shutdown"})
    finally:
        core.shutdown()


if __name__ == "__main__":
    main()
