import logging
import logging.handlers
import os
import sys
import json
from datetime import datetime, timezone
from utilities.settings import get_setting
from api_tracker import setup_api_logging

class DynamicConsoleHandler(logging.StreamHandler):
    def __init__(self):
        super().__init__()
        if sys.platform == 'win32':
            # Set UTF-8 encoding for Windows console
            sys.stdout.reconfigure(encoding='utf-8', errors='replace')
            sys.stderr.reconfigure(encoding='utf-8', errors='replace')
        self.setLevel(self.get_level())

    def get_level(self):
        console_level = get_setting("Debug", "logging_level", "INFO")
        return getattr(logging, str(console_level).upper(), logging.INFO)

class ExcludeFilter(logging.Filter):
    def filter(self, record):
        # Third-party HTTP chatter stays out of the human-readable logs
        if record.name.startswith(('urllib3', 'requests', 'charset_normalizer', 'sentence_transformers', 'filelock')):
            return False

        # Structured pipeline events have their own handler
        if record.name == 'release_tracker':
            return False

        return True

class JSONFormatter(logging.Formatter):
    def format(self, record):
        log_record = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'name': record.name,
        }
        if isinstance(record.msg, dict):
            log_record.update(record.msg) # Merge the dictionary message
        else:
            log_record['message'] = record.getMessage()

        if record.exc_info:
            log_record['exception'] = self.formatException(record.exc_info)
        if record.stack_info:
            log_record['stack_info'] = self.formatStack(record.stack_info)

        return json.dumps(log_record, default=str)

def setup_debug_logging(log_dir):
    # Debug file handler with immediate flush
    class ImmediateRotatingFileHandler(logging.handlers.RotatingFileHandler):
        def emit(self, record):
            super().emit(record)
            self.flush()

    debug_handler = ImmediateRotatingFileHandler(
        os.path.join(log_dir, 'debug.log'),
        maxBytes=50*1024*1024,
        backupCount=5,
        encoding='utf-8',
        errors='replace'
    )
    debug_handler.setLevel(logging.DEBUG)
    debug_handler.addFilter(ExcludeFilter())

    formatter = logging.Formatter('%(asctime)s - %(filename)s:%(funcName)s:%(lineno)d - %(levelname)s - %(message)s')
    debug_handler.setFormatter(formatter)
    logging.getLogger().addHandler(debug_handler)

def setup_info_logging():
    console_handler = DynamicConsoleHandler()
    console_handler.setFormatter(logging.Formatter('%(asctime)s - %(message)s', datefmt='%Y-%m-%d %H:%M:%S'))
    console_handler.addFilter(ExcludeFilter())
    logging.getLogger().addHandler(console_handler)

def setup_release_tracker_logging(log_dir):
    """Sets up the JSON logger for scrape pipeline decisions."""
    tracker_file = os.path.join(log_dir, 'release_tracker.log')
    tracker_handler = logging.handlers.RotatingFileHandler(
        tracker_file,
        maxBytes=50*1024*1024, # 50 MB
        backupCount=5,
        encoding='utf-8'
    )
    tracker_handler.setLevel(logging.INFO)
    tracker_handler.setFormatter(JSONFormatter())

    tracker_logger = logging.getLogger('release_tracker')
    tracker_logger.setLevel(logging.INFO)
    tracker_logger.addHandler(tracker_handler)
    tracker_logger.propagate = False # Prevent logs from going to root logger/console

def setup_logging():
    """Initialize logging configuration"""
    log_dir = os.environ.get('USER_LOGS', '/user/logs')
    os.makedirs(log_dir, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    setup_debug_logging(log_dir)
    setup_info_logging()
    setup_release_tracker_logging(log_dir)
    setup_api_logging(log_dir)

if __name__ == "__main__":
    setup_logging()
    logging.debug("This is a debug message")
    logging.info("This is an info message")
    logging.getLogger('release_tracker').info({'event': 'example', 'detail': 'structured'})
