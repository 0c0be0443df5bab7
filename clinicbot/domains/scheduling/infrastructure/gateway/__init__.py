from .connection_resolver import ConnectionResolver

__all__ = ["ConnectionResolver"]
