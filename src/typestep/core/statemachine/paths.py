# src/typestep/core/statemachine/paths.py
"""Sentinel JSON paths threaded between compiled states.

The compiler tracks, in CompilerState.input_path, where the next emitted
state reads its input from. Only these fixed paths ever appear there.
"""

from typestep.contracts.types import JsonPath

# Detail of the EventBridge event that started the execution
EVENT_DETAIL = JsonPath("$.detail")

# Whole state input; inside a fan-out this is the current element
ELEMENT_ROOT = JsonPath("$")

# Lambda invoke tasks wrap the function result in an envelope; the value
# returned by the function is under Payload
RESULT_FIELD = JsonPath("$.Payload")

# Where a caught error is merged into the failed state's input
ERROR_FIELD = JsonPath("$.error")

# Dead-letter messages carry the whole input plus the error
WHOLE_INPUT = JsonPath("$")
