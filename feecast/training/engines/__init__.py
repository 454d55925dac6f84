"""
Train Engines (FINAL / FROZEN)

- DatasetBuildEngine : blocks → samples (pure)
- OlsTrainEngine     : samples → TrainResult (pure, deterministic)

Engines own ALL numeric semantics. Steps only wire them to the context.
"""
