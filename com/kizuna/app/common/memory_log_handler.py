import logging
from collections import deque
from typing import List, Dict, Optional
from datetime import datetime

class MemoryLogHandler(logging.Handler):
    """Logging handler keeping the most recent records in a bounded buffer"""

    def __init__(self, max_logs: int = 2000):
        super().__init__()
        self.max_logs = max_logs
        self.logs = deque(maxlen=max_logs)
        self.dropped = 0

    def emit(self, record):
        try:
            if len(self.logs) == self.max_logs:
                self.dropped += 1
            self.logs.append({
                "timestamp": datetime.fromtimestamp(record.created).isoformat(),
                "level": record.levelname,
                "logger": record.name,
                "function": record.funcName,
                "line": record.lineno,
                "message": self.format(record)
            })
        except Exception:
            self.handleError(record)

    def get_logs(self, limit: int = 100, level: Optional[str] = None, logger_prefix: Optional[str] = None) -> List[Dict]:
        """Most recent records, oldest first, optionally filtered by level and logger name"""
        entries = list(self.logs)
        if level:
            entries = [entry for entry in entries if entry["level"] == level.upper()]
        if logger_prefix:
            entries = [entry for entry in entries if entry["logger"].startswith(logger_prefix)]
        return entries[-limit:] if limit > 0 else []

    def clear_logs(self):
        self.logs.clear()
        self.dropped = 0

    def get_memory_usage_info(self) -> Dict:
        return {
            "current_logs": len(self.logs),
            "max_logs": self.max_logs,
            "dropped_logs": self.dropped,
            "memory_usage_percent": (len(self.logs) / self.max_logs) * 100 if self.max_logs else 0
        }
