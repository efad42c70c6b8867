import functools
import logging
from typing import Annotated

from fastapi import Depends

from years import ParserOptions, TimeParser, Voyager
from years.build_tree import build_tree

from years_api.config import Settings, settings

logger = logging.getLogger(__name__)


def parser_from_settings(config: Settings) -> TimeParser:
    return TimeParser(
        ParserOptions(
            accept_epoch_seconds=config.accept_epoch_seconds,
            accept_epoch_millis=config.accept_epoch_millis,
            accept_aliases=config.accept_aliases,
            layouts=tuple(config.parser_layouts),
        )
    )


@functools.lru_cache(maxsize=1)
def get_voyager() -> Voyager:
    """FastAPI dependency: the Voyager over the configured root, built once per process."""
    logger.info("Building waypoint tree for %s", settings.root)
    root = build_tree(settings.root, settings.layout, settings.metadata_accessor or None)
    return Voyager(root, parser_from_settings(settings))


VoyagerDep = Annotated[Voyager, Depends(get_voyager)]
