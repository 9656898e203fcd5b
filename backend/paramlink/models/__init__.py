from paramlink.models.category import Category, CategoryKind
from paramlink.models.view import View
from paramlink.models.element import Element
from paramlink.models.parameter import Parameter, StorageType
from paramlink.models.schedule import Schedule, ScheduleField
from paramlink.models.sync_log import SyncLog

__all__ = [
    "Category",
    "CategoryKind",
    "View",
    "Element",
    "Parameter",
    "StorageType",
    "Schedule",
    "ScheduleField",
    "SyncLog",
]
