"""
Logging configuration for the reservation client
Console plus rotating log files, with a dedicated log for reservation writes
"""

import os
import logging
import logging.handlers
from datetime import datetime
from typing import Optional

from infrastructure.settings import AppSettings, get_settings

# Loggers whose output also goes to reservations.log
RESERVATION_LOGGERS = (
    'ReservationRepository',
    'BulkStateTransitionCoordinator',
    'ReservationService',
    'ReservationConfirmationService',
)

# Component loggers tuned by production mode
COMPONENT_LOGGERS = (
    'ApiClient',
    'ErrorWrapper',
    'AvailabilityResolver',
    'AvailabilityPoller',
    'DashboardService',
    'FacilityImageManager',
    'ResponseCache',
) + RESERVATION_LOGGERS


def setup_logging(settings: Optional[AppSettings] = None, *, clear_previous: bool = False) -> str:
    """
    Set up console and rotating file logging.

    Args:
        settings: Settings snapshot; defaults to the cached environment settings.
        clear_previous: Remove log files left by a previous session first.

    Returns:
        The directory the log files are written to.
    """
    settings = settings or get_settings()
    production_mode = settings.production_mode
    log_dir = settings.log_directory

    if clear_previous and os.path.isdir(log_dir):
        for filename in os.listdir(log_dir):
            file_path = os.path.join(log_dir, filename)
            if os.path.isfile(file_path) or os.path.islink(file_path):
                os.unlink(file_path)

    os.makedirs(log_dir, exist_ok=True)

    main_log_file = os.path.join(log_dir, 'client.log')
    debug_log_file = os.path.join(log_dir, 'client_debug.log')
    error_log_file = os.path.join(log_dir, 'client_errors.log')
    reservations_log_file = os.path.join(log_dir, 'reservations.log')

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.WARNING if production_mode else logging.DEBUG)
    root_logger.handlers = []

    # Detailed formatter with file, line, and function information
    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d in %(funcName)s()] - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING if production_mode else logging.INFO)
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    main_file_handler = logging.handlers.RotatingFileHandler(
        main_log_file,
        maxBytes=10*1024*1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    main_file_handler.setLevel(logging.WARNING if production_mode else logging.INFO)
    main_file_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(main_file_handler)

    # Debug log only in development
    if not production_mode:
        debug_file_handler = logging.handlers.RotatingFileHandler(
            debug_log_file,
            maxBytes=50*1024*1024,  # 50MB
            backupCount=3,
            encoding='utf-8'
        )
        debug_file_handler.setLevel(logging.DEBUG)
        debug_file_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(debug_file_handler)

    error_file_handler = logging.handlers.RotatingFileHandler(
        error_log_file,
        maxBytes=5*1024*1024,  # 5MB
        backupCount=5,
        encoding='utf-8'
    )
    error_file_handler.setLevel(logging.ERROR)
    error_file_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(error_file_handler)

    reservations_handler = logging.handlers.RotatingFileHandler(
        reservations_log_file,
        maxBytes=20*1024*1024,  # 20MB
        backupCount=5,
        encoding='utf-8'
    )
    reservations_handler.setLevel(logging.INFO if production_mode else logging.DEBUG)
    reservations_handler.setFormatter(detailed_formatter)

    for name in RESERVATION_LOGGERS:
        component_logger = logging.getLogger(name)
        component_logger.handlers = [
            handler for handler in component_logger.handlers
            if not isinstance(handler, logging.handlers.RotatingFileHandler)
        ]
        component_logger.addHandler(reservations_handler)

    component_level = logging.INFO if production_mode else logging.DEBUG
    for name in COMPONENT_LOGGERS:
        logging.getLogger(name).setLevel(component_level)

    # Reduce noise from external libraries
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)

    root_logger.info("="*80)
    root_logger.info("Reservation client logging initialized - %s", datetime.now())
    root_logger.info("Production Mode: %s", 'ON' if production_mode else 'OFF')
    root_logger.info("Main log: %s", main_log_file)
    if not production_mode:
        root_logger.info("Debug log: %s", debug_log_file)
    root_logger.info("Error log: %s", error_log_file)
    root_logger.info("Reservations log: %s", reservations_log_file)
    root_logger.info("="*80)
    return log_dir

