from __future__ import annotations

from typing import Optional

from .base import ResponseModel


class Version(ResponseModel):
    commit_sha: Optional[str] = None
    commit_date: Optional[str] = None
    pkg_version: str = ""


class Health(ResponseModel):
    status: str

    @property
    def is_available(self) -> bool:
        return self.status == "available"
