import threading
import time

from models.config import Config
from storage import SessionStore


class SharedState:
    """
    Singleton holding the session store and effective config shared by the
    API routes.
    """
    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(SharedState, cls).__new__(cls)
                    cls._instance.store = SessionStore()
                    cls._instance.config = Config()
                    cls._instance.config_lock = threading.Lock()
                    cls._instance.config_path = None
                    cls._instance.start_time = time.time()
        return cls._instance

    def set_store(self, store: SessionStore):
        """Swap the session store (tests use a fresh one per case)."""
        self.store = store

    def set_config(self, config: Config, config_path=None):
        with self.config_lock:
            self.config = config
            self.config_path = config_path

    def get_config(self) -> Config:
        with self.config_lock:
            return self.config


# Global instance
state = SharedState()
