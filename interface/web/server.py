"""Web server - runs the salon API with uvicorn in a background thread.

Usage:
    ```python
    server = WebServer(db_manager, port=8080)
    await server.startup()
    # http://localhost:8080/docs lists every route
    await server.shutdown()
    ```
"""
import asyncio
import threading
from typing import Optional

from loguru import logger

from database import DatabaseManager
from interface.web.api import create_app


class WebServer:
    """uvicorn server hosting the salon API.

    The server runs its own event loop in a daemon thread so the caller's
    loop stays free to handle signals. uvicorn's signal handlers are
    disabled; the caller stops the server through ``shutdown()``.
    """

    def __init__(self, db_manager: DatabaseManager,
                 host: str = "0.0.0.0", port: int = 8080,
                 log_level: str = "warning") -> None:
        self.host = host
        self.port = port
        self.log_level = log_level
        self.db_manager = db_manager
        self.app = create_app(db_manager)
        self.running = False
        self._server_thread: Optional[threading.Thread] = None
        self._server = None  # uvicorn.Server
        self._server_loop: Optional[asyncio.AbstractEventLoop] = None

    async def startup(self) -> None:
        """Start uvicorn and wait until the server object exists."""
        import uvicorn

        self.running = True

        def run_server():
            loop = asyncio.new_event_loop()
            asyncio.set_event_loop(loop)
            self._server_loop = loop

            config = uvicorn.Config(
                self.app,
                host=self.host,
                port=self.port,
                log_level=self.log_level,
                loop="asyncio",
            )
            self._server = uvicorn.Server(config)
            self._server.install_signal_handlers = lambda: None

            try:
                loop.run_until_complete(self._server.serve())
            except Exception as e:
                logger.error(f"Web server crashed: {e}")
            finally:
                pending = asyncio.all_tasks(loop)
                for task in pending:
                    task.cancel()
                if pending:
                    loop.run_until_complete(
                        asyncio.gather(*pending, return_exceptions=True)
                    )
                loop.run_until_complete(loop.shutdown_asyncgens())
                loop.close()

        self._server_thread = threading.Thread(target=run_server, daemon=True)
        self._server_thread.start()

        max_wait = 5
        waited = 0.0
        while self._server is None and waited < max_wait:
            await asyncio.sleep(0.1)
            waited += 0.1

        logger.info(f"Salon API listening on http://{self.host}:{self.port}")

    async def shutdown(self) -> None:
        """Stop the server and release the port."""
        self.running = False

        if self._server is None:
            return

        try:
            logger.info("Stopping web server...")
            self._server.should_exit = True

            if self._server_thread and self._server_thread.is_alive():
                self._server_thread.join(timeout=3.0)

            if self._server_thread and self._server_thread.is_alive():
                logger.warning("Web server did not stop within 3s, forcing exit")
                self._server.force_exit = True
                if self._server_loop and self._server_loop.is_running():
                    self._server_loop.call_soon_threadsafe(self._server_loop.stop)
                self._server_thread.join(timeout=2.0)
                if self._server_thread.is_alive():
                    logger.warning("Web server thread still alive, leaving it to exit with the process")
        except Exception as e:
            logger.error(f"Error while stopping web server: {e}")
        finally:
            self._server = None
            self._server_loop = None
            self._server_thread = None

        logger.info("Web server stopped")
