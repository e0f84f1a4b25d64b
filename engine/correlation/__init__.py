"""
Correlation of independently evaluated result sets by tag-group subset matching.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.correlation.join import Matrix, check_arity, left_join

__all__ = ["Matrix", "check_arity", "left_join"]
