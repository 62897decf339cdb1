"""File logging shared by the coloring modules.

Every module asks for its logger through ``get_logger`` so that all of them
append to the same ``logs/coloring.log``. Set ``COLORING_BOOK_LOG_DIR`` to
redirect the log directory.
"""
import logging
import os

LOG_FILE_NAME = 'coloring.log'


def _log_dir():
    env_dir = os.environ.get('COLORING_BOOK_LOG_DIR')
    if env_dir:
        return env_dir
    return os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'logs')


def get_logger(name, level=logging.INFO):
    logger = logging.getLogger(name)
    logger.setLevel(level)
    # Check if handler already exists to avoid duplicate logs
    if not logger.handlers:
        try:
            log_dir = _log_dir()
            os.makedirs(log_dir, exist_ok=True)
            fh = logging.FileHandler(os.path.join(log_dir, LOG_FILE_NAME))
        except OSError:
            # Read-only installs still get records through propagation
            return logger
        fh.setLevel(level)
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(message)s')
        fh.setFormatter(formatter)
        logger.addHandler(fh)
    return logger
