"""Semantic type aliases for compile-time type safety.

NewType creates distinct types that mypy treats as incompatible,
preventing accidental misuse of semantically different string values.
"""

from typing import NewType

StateName = NewType("StateName", str)
"""Unique state name within a state machine (e.g., 'MapGetUser', 'Seq1a2b3c4d')"""

JsonPath = NewType("JsonPath", str)
"""JSONPath expression selecting part of a state's input (e.g., '$.Payload')"""

Category = NewType("Category", str)
"""EventBridge detail-type used to filter and route events (e.g., 'Account')"""
