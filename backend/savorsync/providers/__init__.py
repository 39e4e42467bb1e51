from savorsync.providers.base import DataProvider
from savorsync.providers.mock import MockDataProvider
from savorsync.providers.tabular import TabularDataProvider

__all__ = ["DataProvider", "MockDataProvider", "TabularDataProvider"]
