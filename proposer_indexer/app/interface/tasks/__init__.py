from __future__ import annotations

from collections.abc import Callable, Coroutine
from typing import Any

from .index_proposers_task import index_proposers_forever_task as indexer__index_proposers_forever_task
from .index_proposers_task import index_proposers_once_task as indexer__index_proposers_once_task
from .height_gaps_task import height_gaps_task as indexer__height_gaps_task
from .statistics_task import serve_statistics_task as statistics__serve_statistics_task

TaskFn = Callable[[], Coroutine[Any, Any, object]]

TASKS: dict[str, TaskFn] = {
    "indexer__index_proposers_forever_task": indexer__index_proposers_forever_task,
    "indexer__index_proposers_once_task": indexer__index_proposers_once_task,
    "indexer__height_gaps_task": indexer__height_gaps_task,
    "statistics__serve_statistics_task": statistics__serve_statistics_task,
}
