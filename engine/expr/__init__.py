"""
Reference expression engine: compilation against a function set and evaluation against metrics and log backends.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.expr.compile import Expression, compile_expression
from engine.expr.funcs import Func, FuncSet, builtin_funcs

__all__ = ["Expression", "compile_expression", "Func", "FuncSet", "builtin_funcs"]
