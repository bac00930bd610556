from .cart import SavedCart


__all__ = ["SavedCart"]
