# logger_config.py
import logging
import os

LOG_FORMAT = '%(asctime)s - %(name)-24s - %(levelname)-8s - %(message)s'

def setup_logging(log_file=None, level=logging.INFO):
    """Configures the root logger. Logs go to log_file when given, else to stderr."""
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handler = logging.FileHandler(log_file, mode='a')
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    if root.hasHandlers():
        root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    return root
