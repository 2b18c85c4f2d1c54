"""
安装结果模型

每个条目的处理结果都记录为一个 EntryOutcome，汇总到 InstallReport。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from mrpack_install.models.manifest import ModEntry


class SkipReason(Enum):
    """条目被跳过的原因"""

    HASH_MISMATCH = "hash_mismatch"
    HTTP_STATUS = "http_status"
    UNSAFE_PATH = "unsafe_path"
    NETWORK_ERROR = "network_error"
    WRITE_ERROR = "write_error"


class OutcomeStatus(Enum):
    INSTALLED = "installed"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"


@dataclass
class EntryOutcome:
    entry: ModEntry
    status: OutcomeStatus
    reason: Optional[SkipReason] = None
    detail: str = ""


@dataclass
class InstallReport:
    """安装统计"""

    outcomes: List[EntryOutcome] = field(default_factory=list)
    bytes_downloaded: int = 0

    def add(
        self,
        entry: ModEntry,
        status: OutcomeStatus,
        reason: Optional[SkipReason] = None,
        detail: str = "",
    ) -> EntryOutcome:
        outcome = EntryOutcome(entry, status, reason, detail)
        self.outcomes.append(outcome)
        return outcome

    def _with_status(self, status: OutcomeStatus) -> List[EntryOutcome]:
        return [o for o in self.outcomes if o.status is status]

    @property
    def installed(self) -> List[EntryOutcome]:
        return self._with_status(OutcomeStatus.INSTALLED)

    @property
    def unchanged(self) -> List[EntryOutcome]:
        return self._with_status(OutcomeStatus.UNCHANGED)

    @property
    def skipped(self) -> List[EntryOutcome]:
        return self._with_status(OutcomeStatus.SKIPPED)
