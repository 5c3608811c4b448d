from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ResourceType(str, Enum):
    FC = "fc"
    OTS = "ots"
    OSS = "oss"


class RemoveOptions(BaseModel):
    types: list[ResourceType] = Field(default_factory=list)
    deep: bool = False
    yaml: str = "s.yaml"

    @staticmethod
    def parse(
        *,
        type_filter: Optional[str] = None,
        remove_all: bool = False,
        deep: bool = False,
        yaml: Optional[str] = None,
    ) -> "RemoveOptions":
        """Build options from raw CLI values.

        ``type_filter`` is a comma-separated list such as "oss, ots"; unknown names are
        logged and dropped. ``remove_all`` selects every resource type.
        """

        if remove_all:
            types = list(ResourceType)
        else:
            types = []
            for raw in (type_filter or "").split(","):
                name = raw.strip().lower()
                if not name:
                    continue
                try:
                    resource_type = ResourceType(name)
                except ValueError:
                    logger.warning("Unknown resource type %r, ignoring", name)
                    continue
                if resource_type not in types:
                    types.append(resource_type)

        return RemoveOptions(types=types, deep=deep, yaml=(yaml or "").strip() or "s.yaml")
