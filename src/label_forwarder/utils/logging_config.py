"""Logging configuration utilities"""
import logging
import logging.config
from pathlib import Path


def setup_logging(log_level='INFO', log_file='logs/forwarder.log'):
    """
    Configure logging for the forwarder

    Console output uses the requested level. When log_file is given a
    rotating file handler also records everything at DEBUG.
    """
    handlers = {
        'console': {
            'class': 'logging.StreamHandler',
            'level': log_level,
            'formatter': 'simple'
        }
    }

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers['file'] = {
            'class': 'logging.handlers.RotatingFileHandler',
            'level': 'DEBUG',
            'formatter': 'detailed',
            'filename': str(log_path),
            'maxBytes': 10485760,  # 10MB
            'backupCount': 5
        }

    config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'detailed': {
                'format': '%(asctime)s | %(name)-35s | %(levelname)-8s | %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            },
            'simple': {
                'format': '%(asctime)s | %(levelname)-8s | %(message)s',
                'datefmt': '%H:%M:%S'
            }
        },
        'handlers': handlers,
        'loggers': {
            # discovery cache warnings are noise for an installed-app client
            'googleapiclient.discovery_cache': {
                'level': 'ERROR'
            }
        },
        'root': {
            'level': 'DEBUG',
            'handlers': list(handlers)
        }
    }

    logging.config.dictConfig(config)
    return logging.getLogger('label_forwarder')
