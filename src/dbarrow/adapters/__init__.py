"""
Source metadata adapters.

This package provides the following components:

- column_info: Column metadata read from DB-API cursor descriptions
- type_mapping: Native type resolution and Arrow schema inference

Neither converts values. Values are converted by the column strategies in
`dbarrow.strategy` once they have been written into transit buffers.
"""
from dbarrow.adapters.column_info import *
from dbarrow.adapters.type_mapping import *
