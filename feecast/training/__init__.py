"""
Training Doctrine (FINAL / FROZEN)

------------------------------------------------------------
Paradigm: Window-Scoped Batch Training
------------------------------------------------------------

Definition:
- TrainingUnit = block window (last N blocks, every `step`-th)
- Model        = Batch OLS (closed-form fit on a finite dataset)
- Window       = explicit and finite (fetch.block_window)

Semantics:
- Each training run operates on a CLOSED, FINITE dataset.
- Samples are owned by the run and discarded with it.
- Model parameters are stateless across runs; a run either publishes a
  complete new model or leaves the previous one in place.

Non-goals:
- Online / incremental updates
- Persisted model artifacts
- More than one live model
"""
