"""Shared request dependencies: pagination and email dispatch."""
from __future__ import annotations

from typing import NamedTuple

from fastapi import BackgroundTasks, Depends, Query

from .mailer import Dispatch, Mailer, background_dispatch, get_mailer


class Pagination(NamedTuple):
    page: int
    limit: int


def pagination(
    page: int = Query(1, ge=1, description="Page must be a positive integer"),
    limit: int = Query(10, ge=1, le=100, description="Limit must be between 1 and 100"),
) -> Pagination:
    return Pagination(page, limit)


def get_dispatch(background: BackgroundTasks, mailer: Mailer = Depends(get_mailer)) -> Dispatch:
    return background_dispatch(background, mailer)
