"""Helper functions for the Visual Studio COM connection

The only thing needed from the IDE is its per-user folder
(e.g. ``Documents\\Visual Studio 2019``), below which visualizers live.
"""
import logging
from pathlib import Path

import pythoncom
import win32com.client

from .errors import HostError

logger = logging.getLogger(__name__)

DEFAULT_PROG_ID = 'VisualStudio.DTE'


def get_visual_studio(prog_id=DEFAULT_PROG_ID):
    """Get the running Visual Studio automation object (DTE)"""
    try:
        pythoncom.CoInitialize()
    except Exception:
        logger.debug("COM already initialized")

    try:
        return win32com.client.GetActiveObject(prog_id)
    except Exception as e:
        logger.debug(f"No running instance for {prog_id}: {e}")

    try:
        return win32com.client.Dispatch(prog_id)
    except Exception as e:
        raise HostError(f"Visual Studio could not be reached via {prog_id}: {e}") from e


def _projects_and_solution_option(dte, name):
    """Read an option from Tools > Options > Projects and Solutions"""
    props = dte.Properties('Environment', 'ProjectsandSolution')
    return props.Item(name).Value


def get_visual_studio_dir(dte):
    """Read the Visual Studio user folder from the IDE settings

    The user project templates option points at
    ``<VisualStudioDir>\\Templates\\ProjectTemplates`` in every version.
    ``ProjectsLocation`` only sits below that folder (``<VisualStudioDir>\\Projects``)
    before VS 2017; later versions default it to ``%USERPROFILE%\\source\\repos``,
    so it is only used when it still has the old layout.
    """
    try:
        templates = _projects_and_solution_option(dte, 'UserProjectTemplatesLocation')
    except Exception as e:
        logger.debug(f"UserProjectTemplatesLocation not available: {e}")
        templates = None

    if templates:
        vs_dir = Path(str(templates)).parent.parent
        logger.debug(f"Visual Studio dir: {vs_dir}")
        return vs_dir

    try:
        projects_location = _projects_and_solution_option(dte, 'ProjectsLocation')
    except Exception as e:
        raise HostError(f"Could not read the Visual Studio folder from the IDE: {e}") from e

    if not projects_location or Path(str(projects_location)).name.lower() != 'projects':
        raise HostError(
            f"Cannot derive the Visual Studio folder from ProjectsLocation {projects_location!r}; "
            "pass it explicitly"
        )

    vs_dir = Path(str(projects_location)).parent
    logger.debug(f"Visual Studio dir: {vs_dir}")
    return vs_dir


def resolve_visual_studio_dir(explicit=None, prog_id=DEFAULT_PROG_ID):
    """Explicit folder wins, otherwise ask the running IDE"""
    if explicit:
        vs_dir = Path(explicit)
        if not vs_dir.is_dir():
            raise HostError(f"Visual Studio dir does not exist: {vs_dir}")
        return vs_dir

    dte = get_visual_studio(prog_id)
    return get_visual_studio_dir(dte)
