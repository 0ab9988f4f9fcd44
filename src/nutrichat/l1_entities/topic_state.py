"""L1 entity: per-topic request state."""

from __future__ import annotations

import enum


class TopicState(enum.Enum):
    IDLE = 'idle'
    LOADING = 'loading'
    RESOLVING = 'resolving'
