from .documents import StoreDocument

__all__ = [
    'StoreDocument',
]
