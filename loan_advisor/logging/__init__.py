from .retrieval_logger import log_retrieval, now_seconds

__all__ = ["log_retrieval", "now_seconds"]
