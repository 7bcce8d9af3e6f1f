from contextlib import contextmanager
from importlib import resources
from pathlib import Path
from typing import Iterator


@contextmanager
def svgo_config_path() -> Iterator[Path]:
    """Filesystem path of the packaged SVGO config, valid inside the ``with`` block."""
    with resources.as_file(resources.files(__package__).joinpath("data/svgo.config.mjs")) as path:
        yield path
