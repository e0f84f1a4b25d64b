"""
Key layout for the metadata store.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import hashlib
import json
from typing import Mapping


def _slug(value: str) -> str:
    return hashlib.sha256(value.encode()).hexdigest()[:32]


def metadata(metric: str) -> str:
    return f"cn:meta:{_slug(metric)}"


def metadata_field(tags: Mapping[str, str], name: str) -> str:
    return json.dumps([sorted(tags.items()), name])
