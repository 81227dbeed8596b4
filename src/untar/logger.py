"""
Logging module for the extractor.
Progress goes to stdout, problems go to stderr, and an optional log file keeps a copy of both.
"""

import sys
import time

# Module-level configuration and state
_debug_level = 2
_log_file = None

ERROR = 0
WARNING = 1
INFO = 2
DEBUG = 3
TRACE = 4


def initialize(debug_level=INFO, log_file=None):
    """Initialize the logger with a specific debug level and optional log file."""
    global _debug_level, _log_file
    _debug_level = debug_level
    _log_file = log_file or None
    trace(f"Logger initialized with debug level {_debug_level}")


def set_level(debug_level):
    global _debug_level
    _debug_level = debug_level


def get_level():
    """Get the current debug level."""
    return _debug_level


def error(message, log_to_file=True):
    """Log an error to stderr. Errors are never filtered by level."""
    message = _printable(message)
    print(f"ERROR: {message}", file=sys.stderr)
    if log_to_file:
        _log_to_file("ERROR", message)


def warning(message, log_to_file=True):
    """Log a warning to stderr."""
    message = _printable(message)
    if _debug_level >= WARNING:
        print(f"WARNING: {message}", file=sys.stderr)
    if log_to_file:
        _log_to_file("WARNING", message)


def info(message, log_to_file=False):
    """Log a progress message."""
    message = _printable(message)
    if _debug_level >= INFO:
        print(message)
    if log_to_file:
        _log_to_file("INFO", message)


def debug(message, log_to_file=False):
    """Log a debug message."""
    message = _printable(message)
    if _debug_level >= DEBUG:
        print(f"DEBUG: {message}")
    if log_to_file:
        _log_to_file("DEBUG", message)


def trace(message, log_to_file=False):
    """Log a trace message."""
    message = _printable(message)
    if _debug_level >= TRACE:
        print(f"TRACE: {message}")
    if log_to_file:
        _log_to_file("TRACE", message)


# Private helper functions
def _printable(message):
    """Show undecodable name bytes (os.fsdecode surrogates) as \\xNN escapes."""
    message = str(message)
    try:
        message.encode('utf-8')
        return message
    except UnicodeEncodeError:
        pass
    try:
        raw = message.encode('utf-8', 'surrogateescape')
    except UnicodeEncodeError:
        # Lone surrogates that did not come from fsdecode
        raw = message.encode('utf-8', 'backslashreplace')
    return raw.decode('utf-8', 'backslashreplace')


def _log_to_file(level, message):
    """Append a message to the log file, if one is configured."""
    if not _log_file:
        return
    try:
        with open(_log_file, 'a', encoding='utf-8', errors='backslashreplace') as f:
            f.write(f"{time.time()} - {level}: {message}\n")
    except OSError as e:
        print(f"Failed to write to log file: {e}", file=sys.stderr)
