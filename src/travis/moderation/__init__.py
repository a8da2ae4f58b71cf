"""
Threshold evaluation and punishment selection.

- **threshold_table.py**: Immutable per-attribute threshold lookup.
- **interfaces.py**: Capabilities the evaluator depends on (scorer, actor, sink).
- **message_evaluator.py**: Per-message decide-and-act state machine.
"""
