from .client import RecordStoreClient
from .models import Record, SortSpec

__all__ = ["Record", "RecordStoreClient", "SortSpec"]
