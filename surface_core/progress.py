"""
Typed progress events emitted while an inference runs.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from app_config.constants import InferenceConfig


class ProgressKind(Enum):
    LOADING = "loading"
    DOWNLOADING = "downloading"
    READY = "ready"
    SEGMENTING = "segmenting"


@dataclass(frozen=True)
class ProgressEvent:
    """One step of the inference status sequence. `percent` is set for DOWNLOADING only."""

    kind: ProgressKind
    percent: Optional[float] = None

    @classmethod
    def loading(cls):
        return cls(ProgressKind.LOADING)

    @classmethod
    def downloading(cls, percent):
        return cls(ProgressKind.DOWNLOADING, max(0.0, min(100.0, float(percent or 0))))

    @classmethod
    def ready(cls):
        return cls(ProgressKind.READY)

    @classmethod
    def segmenting(cls):
        return cls(ProgressKind.SEGMENTING)

    def status_text(self) -> str:
        if self.kind is ProgressKind.DOWNLOADING:
            return InferenceConfig.STATUS_DOWNLOADING.format(pct=int(round(self.percent or 0)))
        return {
            ProgressKind.LOADING: InferenceConfig.STATUS_LOADING,
            ProgressKind.READY: InferenceConfig.STATUS_READY,
            ProgressKind.SEGMENTING: InferenceConfig.STATUS_SEGMENTING,
        }[self.kind]


ProgressCallback = Callable[[ProgressEvent], None]
