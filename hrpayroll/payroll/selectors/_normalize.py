# -*- coding: utf-8 -*-
"""Query-string normalisation shared by the selectors."""
from __future__ import annotations
from typing import Any, List, Optional
from django.utils.dateparse import parse_date


def as_int_list(v: Any) -> List[int]:
    if v is None:
        return []
    if isinstance(v, (list, tuple, set)):
        raw = []
        for x in v:
            if x is None:
                continue
            raw.extend(str(x).split(","))
    else:
        raw = str(v).split(",")
    out = []
    for s in raw:
        s = s.strip()
        if s.isdigit():
            out.append(int(s))
    return out

def as_str_list(v: Any) -> List[str]:
    if not v:
        return []
    items = v if isinstance(v, (list, tuple, set)) else str(v).split(",")
    return [str(s).strip() for s in items if str(s).strip()]

def as_int(v: Any) -> Optional[int]:
    s = str(v).strip() if v is not None else ""
    return int(s) if s.isdigit() else None

def as_date(v: Any):
    return parse_date(v) if v else None
