import os
import logging
from urllib.parse import urlparse
import json
import shutil
from utilities.settings_schema import SETTINGS_SCHEMA
from utilities.file_lock import FileLock

def get_config_dir():
    """Dynamically gets the configuration directory from environment variable."""
    return os.environ.get('USER_CONFIG', '/user/config')

def get_config_file_path():
    return os.path.join(get_config_dir(), 'config.json')

def get_lock_file_path():
    return os.path.join(get_config_dir(), '.config.lock')

class Settings:
    """Holds the config lock for the duration of a read or write."""

    def __init__(self, lock_file_path):
        self.lock_file_path = lock_file_path
        self.fd = None
        self.lock = None

        os.makedirs(os.path.dirname(self.lock_file_path), exist_ok=True)
        if not os.path.exists(self.lock_file_path):
            with open(self.lock_file_path, 'w') as f:
                f.write('')
            logging.debug(f"Created missing lock file at {self.lock_file_path}")

    def __enter__(self):
        self.fd = open(self.lock_file_path, 'r+')
        try:
            self.lock = FileLock(self.fd)
            self.lock.acquire()
        except Exception as e:
            logging.error(f"Failed to acquire lock on {self.lock_file_path}: {e}")
            self.fd.close()
            self.fd = None
            raise
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.fd:
            try:
                self.lock.release()
            except OSError as e:
                logging.error(f"Failed to release lock on {self.lock_file_path}: {e}")
            finally:
                self.fd.close()
                self.fd = None

def _read_json(path):
    with open(path, 'r') as f:
        return json.load(f)

def load_config():
    config_file_path = get_config_file_path()

    if not os.path.exists(config_file_path):
        logging.debug(f"load_config: Config file not found at {config_file_path}. Using schema defaults.")
        return {}

    try:
        with Settings(get_lock_file_path()):
            try:
                return _read_json(config_file_path)
            except json.JSONDecodeError as e:
                logging.error(f"Error decoding JSON from {config_file_path}: {str(e)}. Checking backup.")
                backup_file = config_file_path + '.backup'
                if os.path.exists(backup_file):
                    try:
                        config = _read_json(backup_file)
                        logging.info(f"Successfully loaded config from backup: {backup_file}")
                        return config
                    except (OSError, json.JSONDecodeError) as e_backup:
                        logging.error(f"Failed to load backup {backup_file}: {str(e_backup)}")
                logging.warning("load_config: Backup failed or non-existent. Returning empty config.")
                return {}
    except OSError as e:
        logging.error(f"load_config: Could not read {config_file_path}: {e}. Returning empty config.")
        return {}

def save_config(config):
    config_file_path = get_config_file_path()
    backup_file = config_file_path + '.backup'

    with Settings(get_lock_file_path()):
        if os.path.exists(config_file_path):
            try:
                shutil.copy2(config_file_path, backup_file)
            except OSError as e_backup:
                logging.error(f"Failed to create backup {backup_file}: {str(e_backup)}")

        tmp_path = config_file_path + '.tmp'
        with open(tmp_path, 'w') as config_file:
            json.dump(config, config_file, indent=2)
        os.replace(tmp_path, config_file_path)
        logging.debug(f"save_config: Successfully saved config to {config_file_path}")

def parse_bool(value):
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() in ('true', 'yes', '1', 'on')
    return bool(value)

def get_schema_default(section, key=None):
    schema_section = SETTINGS_SCHEMA.get(section, {})
    if key is None:
        return schema_section.get('default') if 'type' in schema_section else None
    entry = schema_section.get(key)
    if isinstance(entry, dict):
        return entry.get('default')
    return None

def get_setting(section, key=None, default=None):
    config = load_config()

    if key is None:
        section_data = config.get(section)
        if section_data is None:
            section_data = get_schema_default(section)
        return section_data if section_data is not None else {}

    section_data = config.get(section, {})
    if not isinstance(section_data, dict):
        logging.warning(f"get_setting: Section '{section}' is not a dictionary (type: {type(section_data)}). Ignoring it.")
        section_data = {}

    if key in section_data:
        value = section_data[key]
    elif default is not None:
        value = default
    else:
        value = get_schema_default(section, key)

    if isinstance(value, str) and value.lower() in ('true', 'false'):
        return parse_bool(value)

    if isinstance(key, str) and key.lower().endswith('url'):
        return validate_url(value)

    return value

def set_setting(section, key, value):
    config = load_config()
    config.setdefault(section, {})

    if isinstance(key, str) and key.lower().endswith('url'):
        value = validate_url(value)
    if isinstance(value, str) and value.lower() in ('true', 'false'):
        value = parse_bool(value)

    config[section][key] = value
    save_config(config)

def validate_url(url):
    if not url or not isinstance(url, str):
        return ''
    if not url.startswith(('http://', 'https://')):
        url = f'http://{url}'
    result = urlparse(url)
    if all([result.scheme, result.netloc]):
        return url.rstrip('/')
    logging.warning(f"Invalid URL structure (scheme or netloc missing): {url}")
    return ''
