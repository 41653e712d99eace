# -*- coding: utf-8 -*-
"""
Shared DB helpers for the repositories: row locking that degrades gracefully
on backends without SELECT ... FOR UPDATE (sqlite).
"""
from __future__ import annotations
from django.db import connection
from django.db.models import QuerySet


def supports_for_update() -> bool:
    return getattr(connection.features, "has_select_for_update", False)

def for_update(qs: QuerySet) -> QuerySet:
    return qs.select_for_update() if supports_for_update() else qs
