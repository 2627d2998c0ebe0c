from __future__ import annotations

import json
from typing import Any, TypeVar

from aiohttp import web
from pydantic import BaseModel

from volmatch.container import Container
from volmatch.domain.errors import ValidationError

from ..keys import CONTAINER


M = TypeVar("M", bound=BaseModel)


def container(request: web.Request) -> Container:
    return request.app[CONTAINER]


def path_id(request: web.Request, name: str = "id") -> int:
    # routes constrain ids to digits
    return int(request.match_info[name])


async def parse_body(request: web.Request, model: type[M]) -> M:
    try:
        data: Any = await request.json()
    except json.JSONDecodeError as e:
        raise ValidationError("Request body must be JSON") from e
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return model.model_validate(data)
