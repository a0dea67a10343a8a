import requests
import logging
import logging.handlers
from functools import wraps
from urllib.parse import urlparse
import time
import threading
from collections import defaultdict
from requests.exceptions import RequestException
import os

api_logger = logging.getLogger('api_calls')
api_logger.addHandler(logging.NullHandler())
api_logger.propagate = False

def setup_api_logging(log_dir=None):
    api_logger.setLevel(logging.INFO)

    log_dir = log_dir or os.environ.get('USER_LOGS', '/user/logs')
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, 'api_calls.log')

    handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=10*1024*1024,  # 10MB per file
        backupCount=5,
        encoding='utf-8',
        errors='replace'
    )
    formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s',
                                datefmt='%Y-%m-%d %H:%M:%S')
    handler.setFormatter(formatter)

    # Compress old log files on rotation
    def namer(name):
        return name + ".gz"

    def rotator(source, dest):
        import gzip
        with open(source, 'rb') as f_in:
            with gzip.open(dest, 'wb') as f_out:
                f_out.writelines(f_in)
        os.remove(source)

    handler.rotator = rotator
    handler.namer = namer

    api_logger.addHandler(handler)

def log_api_call(func):
    @wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            url = args[0] if args else kwargs.get('url')
            if not isinstance(url, str):
                return func(self, *args, **kwargs)

            method = func.__name__.upper()
            parsed = urlparse(url)
            # Only log domain and path, skip query parameters (they carry search terms)
            api_logger.info(f"{method} {parsed.netloc}{parsed.path}")
        except Exception as e:
            api_logger.error(f"Error in log_api_call: {str(e)}")
        return func(self, *args, **kwargs)
    return wrapper

class APIRateLimiter:
    """Counts calls per domain over sliding windows. Limits are reported, not enforced."""

    def __init__(self, hourly_limit=2000, five_minute_limit=1000):
        self.hourly_limit = hourly_limit
        self.five_minute_limit = five_minute_limit
        self.hourly_calls = defaultdict(list)
        self.five_minute_calls = defaultdict(list)
        self._lock = threading.Lock()

    def check_limits(self, domain):
        current_time = time.time()

        with self._lock:
            self.hourly_calls[domain] = [t for t in self.hourly_calls[domain] if current_time - t < 3600]
            self.five_minute_calls[domain] = [t for t in self.five_minute_calls[domain] if current_time - t < 300]

            self.hourly_calls[domain].append(current_time)
            self.five_minute_calls[domain].append(current_time)

            exceeded = (len(self.hourly_calls[domain]) > self.hourly_limit or
                        len(self.five_minute_calls[domain]) > self.five_minute_limit)

        if exceeded:
            api_logger.warning(f"Call volume for {domain} is above the configured limits")
        return not exceeded

class APITracker:
    def __init__(self):
        self.session = requests.Session()
        self.exceptions = requests.exceptions
        self.rate_limiter = APIRateLimiter()

    def _request(self, method, url, **kwargs):
        domain = urlparse(url).netloc
        self.rate_limiter.check_limits(domain)

        try:
            response = self.session.request(method, url, **kwargs)
            response.raise_for_status()
            return response
        except RequestException as e:
            api_logger.error(f"Error: {domain} - {str(e)}")
            raise

    @log_api_call
    def get(self, url, **kwargs):
        return self._request('GET', url, **kwargs)

api = APITracker()
