"""Error taxonomy shared by the scheduler and its collaborators.

スケジューラは例外を握りつぶさず、違反した前提条件をそのまま送出する。
HTTP 層は `reason_code` を使ってレスポンスへ変換する。
"""

from __future__ import annotations


class VocabSRSError(Exception):
    """Base class for precondition violations raised by this package."""

    reason_code = "VOCAB_SRS_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidArgumentError(VocabSRSError, ValueError):
    """A caller passed a value outside the documented contract (e.g. quality 6)."""

    reason_code = "INVALID_ARGUMENT"


class NotFoundError(VocabSRSError, LookupError):
    """An item id is absent from the working collection.

    スケジューラの関数は item を値で受け取るため ID 解決を行わない。
    この例外を送出するのは ID で引くセッション層のみ。
    """

    reason_code = "NOT_FOUND"

    def __init__(self, item_id: str) -> None:
        super().__init__(f"vocabulary item not found: {item_id}")
        self.item_id = item_id
