"""Runtime wiring helper for CLI applications."""

from dataclasses import dataclass
from pathlib import Path

from .adapters.annotations import RegexAnnotationParser
from .adapters.clock import SystemClock
from .adapters.fs_storage import FsStorage
from .adapters.idgen import UuidId
from .adapters.snapshot_codecs import codec_for
from .config import PlanlogConfig, load_config
from .core.ports import Clock, IdGenerator
from .notebook import Notebook


@dataclass
class Runtime:
    """Container for all wired components."""
    notebook: Notebook
    storage: FsStorage
    config: PlanlogConfig


def build_runtime(
    data_path: Path | None = None,
    config_path: Path | None = None,
    config: PlanlogConfig | None = None,
    clock: Clock | None = None,
    idgen: IdGenerator | None = None,
) -> Runtime:
    """Build and wire all components for a snapshot file."""
    if config is None:
        config = load_config(config_path=config_path, data_path=data_path)

    # CLI arg wins over config
    if data_path is None:
        data_path = config.storage.path

    storage = FsStorage(data_path, codec_for(config.storage.format, data_path))
    parser = RegexAnnotationParser(config.parser.extra_letters)
    notebook = Notebook.open(
        storage,
        clock or SystemClock(),
        idgen or UuidId(),
        parser,
    )

    return Runtime(notebook=notebook, storage=storage, config=config)
