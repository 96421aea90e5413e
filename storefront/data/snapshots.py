"""
Snapshot Persistence

JSON files holding ``StoreRepository.export_data()`` output, so a store can be
saved and restored across process restarts.
"""

from pathlib import Path
from typing import Union

import structlog

from storefront.data.models import StoreSnapshot

logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]


def save_snapshot(snapshot: StoreSnapshot, path: PathLike, indent: int = 2) -> Path:
    """Write ``snapshot`` as JSON, creating parent directories as needed"""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(snapshot.model_dump_json(indent=indent), encoding="utf-8")

    logger.info(
        "Snapshot saved",
        path=str(target),
        products=len(snapshot.products),
        sales=len(snapshot.sales),
    )
    return target


def load_snapshot(path: PathLike) -> StoreSnapshot:
    """
    Read a snapshot written by ``save_snapshot``.

    Raises:
        FileNotFoundError: the file does not exist
        pydantic.ValidationError: the file content is not a valid snapshot
    """
    source = Path(path)
    snapshot = StoreSnapshot.model_validate_json(source.read_text(encoding="utf-8"))
    logger.info(
        "Snapshot loaded",
        path=str(source),
        products=len(snapshot.products),
        sales=len(snapshot.sales),
    )
    return snapshot
