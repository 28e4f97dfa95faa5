"""Project file reading and writing for tickline.

Projects are stored as JSON documents holding the dictionary form of a
``ProjectInfo``. This module only moves info records in and out of
files; building live entities is left to ``Project``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from .config import TimelineConfig
from .exceptions import ParseError, ValidationError
from .models import ProjectInfo
from .project import Project

logger = logging.getLogger(__name__)


def read_project_info(path: Path, config: TimelineConfig | None = None) -> ProjectInfo:
    """Read a project file into a ProjectInfo.

    Args:
        path: Path to the JSON project file.
        config: Supplies the tempo and time signature used when the file
            omits those lists.

    Returns:
        The parsed ProjectInfo.

    Raises:
        ParseError: If the file cannot be read, is not valid JSON, or
            does not describe a project.
    """
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ParseError(f"Project file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON in project file: {e}") from e
    except OSError as e:
        raise ParseError(f"Error reading project file: {e}") from e

    try:
        return ProjectInfo.from_dict(data, config)
    except KeyError as e:
        raise ParseError(f"Project file is missing field {e}") from e
    except (TypeError, ValueError) as e:
        raise ParseError(f"Malformed project file {path}: {e}") from e


def load_project(path: Path, config: TimelineConfig | None = None) -> Project:
    """Load a project file into a live Project.

    Args:
        path: Path to the JSON project file.
        config: Resolution and defaults for the project.

    Returns:
        The loaded Project.

    Raises:
        ParseError: If the file cannot be parsed or holds invalid values.
    """
    info = read_project_info(path, config)
    try:
        project = Project(info, config)
    except ValidationError as e:
        raise ParseError(f"Invalid value in project file {path}: {e}") from e
    logger.info("Loaded project from %s", path)
    return project


def save_project(path: Path, project: Project) -> bool:
    """Write a project to a JSON file.

    Args:
        path: Destination path.
        project: Project to save.

    Returns:
        True if saved successfully, False otherwise.
    """
    try:
        with path.open("w", encoding="utf-8") as f:
            json.dump(project.get_info().to_dict(), f, indent=2)
        logger.info("Saved project to %s", path)
        return True
    except OSError as e:
        logger.warning("Failed to write project file %s: %s", path, e)
        return False
