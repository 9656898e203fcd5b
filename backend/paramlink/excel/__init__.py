"""Excel synchronization engine.

Resolves parameter names on host elements, converts values to and from
cell text, and reads/writes workbooks whose cell colours carry
editability.
"""

from paramlink.excel.bridge import DirectBridge, HostBridge
from paramlink.excel.codec import ValueCodec
from paramlink.excel.errors import ErrorRecord, HostFileLocked, SyncError
from paramlink.excel.exporter import CategoryExporter, cell_state
from paramlink.excel.palette import PALETTE, CellState
from paramlink.excel.reader import ExcelReader
from paramlink.excel.resolver import BUILTIN_PARAMETERS, ParameterResolver, Tier
from paramlink.excel.schedule import ScheduleExtractor
from paramlink.excel.sync import SyncManager, SyncResult
from paramlink.excel.writer import ExcelWriter

__all__ = [
    "BUILTIN_PARAMETERS",
    "CategoryExporter",
    "CellState",
    "DirectBridge",
    "ErrorRecord",
    "ExcelReader",
    "ExcelWriter",
    "HostBridge",
    "HostFileLocked",
    "PALETTE",
    "ParameterResolver",
    "ScheduleExtractor",
    "SyncError",
    "SyncManager",
    "SyncResult",
    "Tier",
    "ValueCodec",
    "cell_state",
]
