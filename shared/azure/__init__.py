"""shared/azure - Azure 공유 유틸리티 (테이블 플러그인)"""

from . import tables

__all__ = ["tables"]
