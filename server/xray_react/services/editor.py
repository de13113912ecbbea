import logging
import shutil
import subprocess
import webbrowser
from pathlib import Path
from typing import Optional

from xray_react.config import resolve_editor

logger = logging.getLogger(__name__)


def open_file(file_path: str, editor: Optional[str] = None) -> bool:
    """
    Open ``file_path`` in the configured editor (``XRAY_REACT_EDITOR``), or
    with the platform's default handler when no editor is set.

    Returns False if the launch failed; the failure is logged, never raised.
    """
    command = editor or resolve_editor()
    try:
        if command:
            executable = shutil.which(command) or command
            subprocess.Popen([executable, file_path])
            return True
        return webbrowser.open(Path(file_path).resolve().as_uri())
    except (OSError, ValueError) as e:
        logger.error("Failed to open %s in editor %s: %s", file_path, command or "<default>", e)
        return False
