import os
import logging
from typing import Tuple
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

class Config:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        """Initialize configuration values"""
        # Realtime event bus
        self.event_history_size = int(os.getenv("EVENT_HISTORY_SIZE", "1000"))
        self.connection_idle_timeout_seconds = float(os.getenv("CONNECTION_IDLE_TIMEOUT_SECONDS", "1800"))
        self.connection_sweep_interval_seconds = float(os.getenv("CONNECTION_SWEEP_INTERVAL_SECONDS", "300"))
        self.subscriber_queue_size = int(os.getenv("SUBSCRIBER_QUEUE_SIZE", "1000"))

        # Language detection
        self.local_term_priority: Tuple[str, ...] = tuple(
            code.strip() for code in os.getenv("LOCAL_TERM_PRIORITY", "lg,sw").split(",") if code.strip()
        )

        # Logging
        self.log_buffer_size = int(os.getenv("LOG_BUFFER_SIZE", "2000"))
        self.log_level = os.getenv("LOG_LEVEL", "DEBUG").upper()

        logger.debug(f"Config initialized - History size: {self.event_history_size}, "
                     f"Idle timeout: {self.connection_idle_timeout_seconds}s, "
                     f"Sweep interval: {self.connection_sweep_interval_seconds}s")

        if not self.local_term_priority:
            logger.warning("LOCAL_TERM_PRIORITY is empty, ambiguous local terms will use glossary order")

    @classmethod
    def reload(cls) -> "Config":
        """Drop the cached instance and re-read the environment"""
        cls._instance = None
        return cls()
