"""Dataset handles and the hot-swap store."""

from micro_geoip.store.handle import DatasetHandle, load_dataset
from micro_geoip.store.hot_swap import HotSwapStore

__all__ = ["DatasetHandle", "HotSwapStore", "load_dataset"]
