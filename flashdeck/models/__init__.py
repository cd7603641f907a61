from flashdeck.models.blob import StoredBlob

__all__ = [
    "StoredBlob"
]
