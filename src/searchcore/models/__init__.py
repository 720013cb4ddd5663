from .task import (
    TERMINAL_STATUSES,
    Task,
    TaskDetails,
    TaskError,
    TaskInfo,
    TasksQuery,
    TasksResults,
    TaskStatus,
    TaskType,
)
from .key import Key, KeyCreate, KeysQuery, KeysResults, KeyUpdate
from .search import SearchRequest, SearchResponse
from .index import (
    DocumentsResults,
    IndexesQuery,
    IndexesResults,
    IndexInfo,
    IndexStats,
    Settings,
    Stats,
)
from .system import Health, Version
from .tenant_token import (
    ExtendedRestriction,
    FilterRestriction,
    NoRestriction,
    SearchRule,
    coerce_search_rule,
)

__all__ = [
    "TERMINAL_STATUSES",
    "Task",
    "TaskDetails",
    "TaskError",
    "TaskInfo",
    "TasksQuery",
    "TasksResults",
    "TaskStatus",
    "TaskType",
    "Key",
    "KeyCreate",
    "KeysQuery",
    "KeysResults",
    "KeyUpdate",
    "SearchRequest",
    "SearchResponse",
    "DocumentsResults",
    "IndexesQuery",
    "IndexesResults",
    "IndexInfo",
    "IndexStats",
    "Settings",
    "Stats",
    "Health",
    "Version",
    "ExtendedRestriction",
    "FilterRestriction",
    "NoRestriction",
    "SearchRule",
    "coerce_search_rule",
]
