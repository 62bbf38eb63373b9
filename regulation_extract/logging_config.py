import logging

# verbosity 0 is reserved for errors and warnings, 1-3 are progress, 4+ is detail
_VERBOSITY_LEVELS = {0: logging.WARNING, 1: logging.INFO, 2: logging.INFO, 3: logging.INFO}


def verbosity_to_level(verbosity):
    """Translate a 0-6 verbosity setting from the configuration into a logging level"""
    if verbosity is None or verbosity < 0:
        return logging.WARNING
    return _VERBOSITY_LEVELS.get(verbosity, logging.DEBUG)


def setup_logger(console_log_level=logging.INFO, file_log_level=None,
                 file_log_name="regulation_extract.log",
                 log_format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"):
    """Configure the package logger with a console handler and an optional file handler.

    Calling again replaces the handlers, so the levels read from the
    configuration file can be applied after the module level default.
    """
    logger = logging.getLogger("regulation_extract")
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_log_level)
    console_formatter = logging.Formatter(log_format, datefmt="%Y-%m-%d %H:%M:%S")
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if file_log_level is not None and file_log_name:
        file_handler = logging.FileHandler(file_log_name, encoding="utf-8")
        file_handler.setLevel(file_log_level)
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                                      datefmt="%Y-%m-%d %H:%M:%S")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def configure_from_options(options):
    """Apply debug_level_console / debug_level_file / log_file from ExportOptions"""
    file_level = None
    if options.debug_level_file > 0:
        file_level = verbosity_to_level(options.debug_level_file)
    return setup_logger(console_log_level=verbosity_to_level(options.debug_level_console),
                        file_log_level=file_level,
                        file_log_name=options.log_file,
                        log_format="%(asctime)s - %(message)s")


# setup at module level so importing modules can log before configuration is read
logger = setup_logger(log_format="%(asctime)s - %(message)s")
