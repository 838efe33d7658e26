"""
Utility Functions
=================

This module provides general utility functions used throughout PyCornelius,
namely the logging configuration and the hypersurface settings.

Functions
---------
configure_logging
    Set up logging for the PyCornelius package with customizable
    output format and destinations.
load_settings
    Read ``HypersurfaceSettings`` from a JSON file.
save_settings
    Write ``HypersurfaceSettings`` to a JSON file.
"""

import json
import logging
import typing

import PyCornelius
from PyCornelius.geometry_element import EPSILON

logger = logging.getLogger(PyCornelius.__name__)


def configure_logging(level=logging.INFO, logfile=None):
    """Configure logging for the PyCornelius package.

    Sets up a logger with a standard format and optional file output.
    This is called automatically when PyCornelius is imported.

    Parameters
    ----------
    level : int, default logging.INFO
        Logging level (e.g., logging.DEBUG, logging.INFO, logging.WARNING).
    logfile : str, optional
        Path to log file. If provided, logs are written to both console
        and file. If None, logs only to console.

    Examples
    --------
    >>> from PyCornelius.utils import configure_logging
    >>> import logging
    >>>
    >>> # Set debug level and log to file
    >>> configure_logging(level=logging.DEBUG, logfile='cornelius.log')

    Notes
    -----
    The log format is: "HH:MM:SS message"
    """
    logger = logging.getLogger(PyCornelius.__name__)
    logger.setLevel(level)

    formatter = logging.Formatter("%(asctime)s %(message)s", datefmt="%H:%M:%S")
    # repeated calls only change the level and add file handlers
    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        logger_handler = logging.StreamHandler()
        logger_handler.setFormatter(formatter)
        logger.addHandler(logger_handler)

    if logfile is not None:
        file_logger_handler = logging.FileHandler(logfile)
        file_logger_handler.setFormatter(formatter)
        logger.addHandler(file_logger_handler)


class HypersurfaceSettings(typing.TypedDict, total=False):
    """
    Settings of a hypersurface search.

    - `threshold` (float): Value of the field on the surface, e.g. the
      freeze-out temperature.
    - `spacing` (list of float): Cell edge length along every axis.
    - `origin` (list of float): Absolute position of grid node (0, ..., 0).
    - `epsilon` (float): Tolerance for point coincidence.

    Example
    -------
    >>> settings: HypersurfaceSettings = {
    ...     "threshold": 0.15,
    ...     "spacing": [0.1, 0.2, 0.2],
    ...     "origin": [0.6, -15.0, -15.0],
    ... }
    """

    threshold: float
    spacing: list[float]
    origin: list[float]
    epsilon: float


_DEFAULT_SETTINGS: HypersurfaceSettings = {"epsilon": EPSILON}


def load_settings(filename) -> HypersurfaceSettings:
    """Loads hypersurface settings from a JSON file.

    Missing optional keys are filled with defaults, unknown keys are dropped
    with a warning.

    Raises
    ------
    ValueError
        If ``threshold`` or ``spacing`` is missing.
    """
    with open(filename, "r") as f:
        loaded = json.load(f)

    settings: HypersurfaceSettings = dict(_DEFAULT_SETTINGS)
    for key, value in loaded.items():
        if key not in HypersurfaceSettings.__annotations__:
            logger.warning(f"Ignoring unknown setting '{key}' in {filename}")
            continue
        settings[key] = value

    for key in ("threshold", "spacing"):
        if key not in settings:
            raise ValueError(f"Setting '{key}' missing in {filename}")
    if "origin" in settings and len(settings["origin"]) != len(settings["spacing"]):
        raise ValueError("Settings 'origin' and 'spacing' differ in length")
    return settings


def save_settings(settings: HypersurfaceSettings, filename):
    with open(filename, "w") as f:
        json.dump(settings, f, indent=4)
