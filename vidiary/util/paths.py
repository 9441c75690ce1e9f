"""Manages vidiary directory structure following the XDG Base Directory layout.

Directory layout:
    ~/.config/vidiary/
        config.yaml         # User configuration

    ~/.local/share/vidiary/
        vidiary.db          # SQLite database (clips and watched flags)
"""

import os
from pathlib import Path


class DiaryPaths:
    """Resolves vidiary paths.

    The data directory is taken from, in order: the ``data_dir`` argument,
    ``VIDIARY_DATA_DIR``, ``$XDG_DATA_HOME/vidiary``, ``~/.local/share/vidiary``.
    """

    def __init__(
        self,
        *,
        config_dir: Path | None = None,
        data_dir: Path | None = None,
    ) -> None:
        home = Path.home()
        self._config_dir = config_dir or self._xdg("XDG_CONFIG_HOME", home / ".config")
        self._data_dir = data_dir or self._env_data_dir() or self._xdg(
            "XDG_DATA_HOME", home / ".local" / "share"
        )

    @staticmethod
    def _env_data_dir() -> Path | None:
        value = os.environ.get("VIDIARY_DATA_DIR")
        return Path(value).expanduser() if value else None

    @staticmethod
    def _xdg(var: str, fallback: Path) -> Path:
        base = os.environ.get(var)
        return (Path(base) if base else fallback) / "vidiary"

    @property
    def config_dir(self) -> Path:
        """Config directory (~/.config/vidiary)."""
        return self._config_dir

    @property
    def data_dir(self) -> Path:
        """Data directory (~/.local/share/vidiary)."""
        return self._data_dir

    @property
    def config_file(self) -> Path:
        return self._config_dir / "config.yaml"

    @property
    def database_file(self) -> Path:
        return self._data_dir / "vidiary.db"

