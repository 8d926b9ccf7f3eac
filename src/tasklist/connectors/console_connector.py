# src/tasklist/connectors/console_connector.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..cli.commands import InvalidMenuSelection, MenuRegistry
from ..cli.commands import registry as menu_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)

Reader = Callable[[str], str]
Writer = Callable[[str], None]


def run_console_loop(
    state: AppState,
    *,
    read: Reader | None = None,
    write: Writer | None = None,
    registry: MenuRegistry | None = None,
) -> None:
    """
    Blocking menu loop: show menu, read one selection, run it, repeat.

    Invalid selections re-show the menu without touching the store.
    Returns when the exit entry is chosen, on EOF, or on Ctrl+C.
    """
    read = read or input
    write = write or print
    registry = registry or menu_registry
    logger.info("Console connector started (tasks=%s).", state.task_store.count_tasks())

    while True:
        write(registry.build_menu())
        try:
            raw = read("> ")
            entry = registry.resolve(raw)
        except InvalidMenuSelection as e:
            logger.debug("Invalid menu selection: %s", e)
            write("Invalid input. Try again.")
            continue
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            write("")
            break

        try:
            reply = registry.handle(state, entry, read, write)
        except (EOFError, KeyboardInterrupt):
            logger.info("Input closed during menu command %s, exiting.", entry.key)
            break
        except Exception:
            logger.exception("Menu command %s crashed.", entry.key)
            reply = "Internal error while handling a command."

        write(reply)

        if entry.handler is None:
            logger.info("Console exit command received.")
            break

    logger.info("Console connector finished.")
