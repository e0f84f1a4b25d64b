"""
Engine packages for Certain Notify: tag groups, results, expression resolution, execution and correlation.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.enums import ReturnType, Status
from engine.results import Result, ResultSet, Series
from engine.tags import TagSet

__all__ = ["ReturnType", "Status", "Result", "ResultSet", "Series", "TagSet"]
