"""Survey reply ingestion - webhook transport and orchestration service"""

from .service import ReplyIngestionService

__all__ = ["ReplyIngestionService"]
