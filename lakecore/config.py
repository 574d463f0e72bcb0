#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import json
import logging
import os
from pathlib import Path

import yaml

DEFAULT_DATABASE_URL = 'sqlite+aiosqlite:///lake.db'
DEFAULT_LOG_FORMAT = '[%(asctime).19s] [%(name)s] [%(levelname)s] %(message)s'
DEFAULT_PLUGINS = ['plugins.bitbucket']

DATABASE_URL_ENV = 'LAKE_DATABASE_URL'


def configure_logger(logger,
                     log_file=None,
                     log_format=None,
                     log_level=logging.INFO):
    """Configure a logger with a file or stream handler

    Args:
        logger: Logger instance or logger name string
        log_file: File path string or file-like object (None for stderr)
        log_format: Format string for log messages
        log_level: Logging level (e.g., logging.INFO, logging.DEBUG)

    Returns:
        Configured logger instance
    """
    # Create file handler if path string, otherwise stream handler
    if isinstance(log_file, str):
        handler = logging.FileHandler(
            log_file,
            mode='a',
            encoding='utf-8',
            errors='replace'
        )
    else:
        handler = logging.StreamHandler(log_file)  # Default to stderr if None

    formatter = logging.Formatter(log_format or DEFAULT_LOG_FORMAT)

    # Get logger by name if string provided
    if isinstance(logger, str):
        logger = logging.getLogger(logger)

    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(log_level)

    return logger


def load_config(config_file=None):
    """Load configuration from a JSON or YAML file

    The format is chosen by extension (.yaml/.yml -> YAML, anything
    else -> JSON). Keys missing from the file fall back to defaults, and
    a missing file yields the defaults alone.

    Args:
        config_file: Path to the config file (None for defaults only)

    Returns:
        Configuration dictionary with keys: database_url, log_level,
        log_file, applied_by, plugins
    """
    conf = {
        'database_url': DEFAULT_DATABASE_URL,
        'log_level': 'info',
        'log_file': None,
        'applied_by': 'system',
        'plugins': list(DEFAULT_PLUGINS),
    }

    if config_file is None:
        return conf

    path = Path(config_file)
    if not path.exists():
        logging.getLogger(__name__).warning(
            'Config file %s not found, using defaults', path
        )
        return conf

    with open(path, 'r', encoding='utf-8') as fp:
        if path.suffix in ('.yaml', '.yml'):
            loaded = yaml.safe_load(fp)
        else:
            loaded = json.load(fp)

    if loaded is None:
        return conf
    if not isinstance(loaded, dict):
        raise ValueError(
            f"Config file {path} must contain a mapping, got {type(loaded).__name__}"
        )

    conf.update(loaded)
    return conf


def resolve_database_url(conf, override=None):
    """Pick the database URL to use

    Tries (in order):
    1. Explicit override (e.g. --database-url flag)
    2. LAKE_DATABASE_URL environment variable
    3. database_url from the config dictionary
    4. Default SQLite (lake.db)

    Returns:
        Database URL or file path accepted by LakeDatabase
    """
    if override:
        return override

    if DATABASE_URL_ENV in os.environ:
        return os.environ[DATABASE_URL_ENV]

    return conf.get('database_url') or DEFAULT_DATABASE_URL


def parse_log_level(level_name):
    """Parse a log level name ('info', 'DEBUG', ...) into a logging constant"""
    level = getattr(logging, str(level_name).upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {level_name}")
    return level
