from interface.web.api import create_app, get_db
from interface.web.server import WebServer

__all__ = ["create_app", "get_db", "WebServer"]
