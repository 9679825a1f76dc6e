import argparse
import logging
import sys

from nicegui import app as ng_app
from nicegui import ui

from netcmd.common.logging_config import TRACE, attach_ui_log, configure_logging
from netcmd.constants import (
    CLOSE_TIMEOUT_S,
    DEST_HOST,
    DEST_PORT,
    LOCAL_PORT,
    LOG_LEVEL,
    REPEAT_INTERVAL_S,
    SERVER_HOST,
    SERVER_PORT,
)
from netcmd.pages.register import RegisterPage
from netcmd.pages.send import ListenerViewObserver, SendPage
from netcmd.services.events import LoggingObserver
from netcmd.services.transport import controller
from netcmd.state import destination_form, listener_view

# Runtime configuration (resolved later from CLI/env)
RUNTIME_SERVER_HOST = SERVER_HOST
RUNTIME_SERVER_PORT = SERVER_PORT

destination_form.host = DEST_HOST
destination_form.port = DEST_PORT
destination_form.local_port = LOCAL_PORT
destination_form.repeat_interval_s = REPEAT_INTERVAL_S

# Page instances
register_page_instance = RegisterPage()
send_page_instance = SendPage()
register_page_instance.on_change.append(send_page_instance.render_commands)


def build_header_and_tabs() -> None:
    with ui.header().classes("items-center justify-between px-4 py-1"):
        ui.label("UDP Command Register").classes("text-lg font-medium")
        with ui.tabs() as main_tabs:
            send_tab = ui.tab("Send")
            register_tab = ui.tab("Register")
        ui.label().bind_text_from(
            listener_view, "status_text", backward=lambda v: f"Listener: {v}"
        ).classes("text-sm")

    with ui.tab_panels(main_tabs, value=send_tab).classes("w-full"):
        with ui.tab_panel(send_tab):
            send_page_instance.build()
        with ui.tab_panel(register_tab):
            register_page_instance.build()


@ui.page("/")
def index() -> None:
    build_header_and_tabs()
    if send_page_instance.response_log:
        attach_ui_log(send_page_instance.response_log)


async def _app_startup() -> None:
    controller.events.subscribe(LoggingObserver())
    controller.events.subscribe(ListenerViewObserver(listener_view))
    try:
        await controller.open()
    except OSError as e:
        logging.error("UDP client socket could not be created: %s", e)


async def _app_shutdown() -> None:
    await send_page_instance.repeater.stop()
    await controller.close(CLOSE_TIMEOUT_S)


ng_app.on_startup(_app_startup)
ng_app.on_shutdown(_app_shutdown)


if __name__ in {"__main__", "__mp_main__"}:
    parser = argparse.ArgumentParser(description="UDP Command Register")
    parser.add_argument("--host", default=SERVER_HOST, help="Webserver bind host")
    parser.add_argument(
        "--port", type=int, default=SERVER_PORT, help="Webserver bind port"
    )
    parser.add_argument("--dest-host", default=DEST_HOST, help="Default destination IP")
    parser.add_argument(
        "--dest-port", type=int, default=DEST_PORT, help="Default destination UDP port"
    )
    parser.add_argument(
        "--local-port", type=int, default=LOCAL_PORT, help="Default local receive port"
    )
    parser.add_argument(
        "--log-level",
        choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set log level",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity; -v=INFO, -vv=DEBUG",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Enable WARNING logging"
    )
    args, _ = parser.parse_known_args()

    RUNTIME_SERVER_HOST = args.host
    RUNTIME_SERVER_PORT = int(args.port)
    destination_form.host = args.dest_host
    destination_form.port = int(args.dest_port)
    destination_form.local_port = int(args.local_port)

    # Resolve log level priority: explicit --log-level > -v/-q > env default from constants
    if args.log_level:
        if args.log_level == "TRACE":
            RUNTIME_LOG_LEVEL = TRACE
        else:
            RUNTIME_LOG_LEVEL = getattr(logging, args.log_level)
    elif args.verbose >= 3:
        RUNTIME_LOG_LEVEL = TRACE
    elif args.verbose >= 2:
        RUNTIME_LOG_LEVEL = logging.DEBUG
    elif args.verbose == 1:
        RUNTIME_LOG_LEVEL = logging.INFO
    elif args.quiet:
        RUNTIME_LOG_LEVEL = logging.WARNING
    else:
        RUNTIME_LOG_LEVEL = LOG_LEVEL

    configure_logging(RUNTIME_LOG_LEVEL)
    logging.info(
        f"Webserver bind: host={RUNTIME_SERVER_HOST} port={RUNTIME_SERVER_PORT}"
    )
    logging.info(
        f"Default destination: {destination_form.host}:{destination_form.port}"
    )

    ui.run(
        title="UDP Command Register",
        host=RUNTIME_SERVER_HOST,
        port=RUNTIME_SERVER_PORT,
        reload=False,
        show=False,
        loop="uvloop" if sys.platform != "win32" else "asyncio",
        http="httptools",
        ws="wsproto",
    )
