"""
Exception hierarchy for expression resolution, execution and render-time lookups.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""


class RenderError(Exception):
    pass


class InputError(RenderError):
    pass


class TagParseError(InputError, ValueError):
    pass


class JoinArgumentError(InputError):
    pass


class ExpressionError(RenderError):
    pass


class ReturnTypeError(ExpressionError):
    pass


class ExecutionError(RenderError):
    pass


class NoResults(ExecutionError):
    pass


class LookupFailure(ExecutionError):
    pass


class UnknownLookupTable(LookupFailure):
    pass


class LookupMiss(LookupFailure):
    pass


class SearchError(ExecutionError):
    pass
