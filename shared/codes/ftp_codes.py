"""
FTP reply codes and their mapping to internal business codes.
"""
from __future__ import annotations

from enum import IntEnum
from typing import Optional

from shared.codes import BusinessCode


class FtpReply(IntEnum):
    # Permanent negative completion (5xx) replies with a dedicated classification
    NOT_LOGGED_IN = 530
    FILE_UNAVAILABLE = 550


# Remote reply → business code; anything absent is a generic transfer error
REPLY_TO_BUSINESS_CODE = {
    FtpReply.FILE_UNAVAILABLE: BusinessCode.REMOTE_FILE_NOT_FOUND,
    FtpReply.NOT_LOGGED_IN: BusinessCode.REMOTE_UNAUTHORIZED,
}


def business_code_for_reply(reply: Optional[int]) -> BusinessCode:
    if reply is None:
        return BusinessCode.TRANSFER_ERROR
    try:
        return REPLY_TO_BUSINESS_CODE.get(FtpReply(reply), BusinessCode.TRANSFER_ERROR)
    except ValueError:
        return BusinessCode.TRANSFER_ERROR


__all__ = ["FtpReply", "REPLY_TO_BUSINESS_CODE", "business_code_for_reply"]
