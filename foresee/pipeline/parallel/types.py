# foresee/pipeline/parallel/types.py
from enum import Enum


class ParallelKind(str, Enum):
    THREAD = "thread"
    PROCESS = "process"
