"""Background task processing."""

from trustlink.tasks.notifications import enqueue_results_summary, send_results_summary
from trustlink.tasks.queue import get_queue_settings, queue

__all__ = ["enqueue_results_summary", "get_queue_settings", "queue", "send_results_summary"]
