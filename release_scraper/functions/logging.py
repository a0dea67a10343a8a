import logging

def setup_release_tracker():
    tracker = logging.getLogger('release_tracker')
    tracker.addHandler(logging.NullHandler())
    tracker.propagate = False
    return tracker

release_tracker = setup_release_tracker()

def log_event(event: str, level: int = logging.INFO, **fields):
    """Emit a structured pipeline event; the JSON handler merges the dict into the record."""
    payload = {'event': event}
    payload.update(fields)
    release_tracker.log(level, payload)
