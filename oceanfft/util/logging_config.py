
import logging

from pathlib import Path

def setup_logging(log_level: str = "INFO", log_to_file: bool = False) -> None:
    """
    Configure logging for the ocean FFT pipeline.
    - Console handler for real-time output.
    - Optional file handler for persistent logs.
    - Custom formatter with timestamps, levels and messages.
    """
    log_level = log_level.upper()

    # Create logger
    logger = logging.getLogger()
    logger.setLevel(log_level)

    if logger.hasHandlers():
        logger.handlers.clear()

    # logger format
    formatter = logging.Formatter('(%(asctime)s) [%(levelname)s] <%(filename)s> %(message)s')

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler (optional, logs to the working directory)
    if log_to_file:
        log_dir = Path.cwd() / "logs"
        log_dir.mkdir(exist_ok=True)
        file_handler = logging.FileHandler(log_dir / "oceanfft.log")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Keep Panda3D's python-side loggers in step with ours
    logging.getLogger('panda3d').setLevel(log_level)
