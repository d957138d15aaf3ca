"""User-facing interfaces.

Currently a single channel: the FastAPI JSON API used by the salon's
point-of-sale and back-office clients.

Usage:
    ```python
    from interface.web import WebServer

    server = WebServer(db_manager, port=8080)
    await server.startup()
    ```
"""
