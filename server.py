"""Server entry point: listening socket, accept loop and one thread per connection."""

from __future__ import annotations

import argparse
import logging
import socket
import threading

from config import ACCEPT_POLL_SECS, HOST, LISTEN_BACKLOG, LOG_FORMAT, PORT, ServerConfig
from connection_handler import ConnectionHandler
from plugin import Plugin, load_plugin

logger = logging.getLogger(__name__)


class HTTPServer:
    def __init__(
        self,
        root_directory: str,
        host: str = HOST,
        port: int = PORT,
        *,
        plugin: Plugin | None = None,
        log_format: str = LOG_FORMAT,
    ) -> None:
        self.host = host
        self.port = port
        self.config = ServerConfig.from_root(root_directory, plugin)
        self.handler = ConnectionHandler(self.config, log_format=log_format)

        self._server_socket: socket.socket | None = None
        self._running = False

    def start(self) -> None:
        """Listen and hand every accepted connection to its own thread.

        Connection threads are never joined and their number is not bounded.
        """
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as server_socket:
            self._server_socket = server_socket
            server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            server_socket.bind((self.host, self.port))
            server_socket.listen(LISTEN_BACKLOG)
            server_socket.settimeout(ACCEPT_POLL_SECS)
            self.port = server_socket.getsockname()[1]
            logger.info(
                "Serving %s on %s:%s (plugin: %s)",
                self.config.root_directory or "/",
                self.host,
                self.port,
                type(self.config.plugin).__name__ if self.config.plugin is not None else "none",
            )

            self._running = True
            while self._running:
                try:
                    client_socket, address = server_socket.accept()
                except socket.timeout:
                    continue
                except OSError:
                    break

                # Accepted sockets stay blocking; a stalled peer only holds its own thread.
                client_socket.settimeout(None)
                worker = threading.Thread(
                    target=self.handler.handle,
                    args=(client_socket, address),
                    name=f"http-conn-{address[1]}",
                    daemon=True,
                )
                worker.start()

    def stop(self) -> None:
        self._running = False
        if self._server_socket is not None:
            self._server_socket.close()
            self._server_socket = None


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve files from a root directory")
    parser.add_argument("port", type=int)
    parser.add_argument("root", help="directory served as /")
    parser.add_argument("--host", default=HOST)
    parser.add_argument(
        "--plugin",
        default=None,
        help="plugin to install, as module:attribute",
    )
    parser.add_argument("--log-format", choices=["plain", "json"], default=LOG_FORMAT)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.INFO)
    plugin = load_plugin(args.plugin) if args.plugin else None
    server = HTTPServer(
        args.root,
        host=args.host,
        port=args.port,
        plugin=plugin,
        log_format=args.log_format,
    )
    try:
        server.start()
    except KeyboardInterrupt:
        server.stop()


if __name__ == "__main__":
    main()
