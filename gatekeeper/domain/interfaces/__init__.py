from .store import IRBACStore

__all__ = ["IRBACStore"]
